"""
GitHub RecordStore over the contents API.

Each record is one file at ``<base_path>/<encoded id><extension>`` on the
configured branch. The blob sha seen on the last get()/put() of a path is
cached and sent with the next write, so GitHub rejects writes based on stale
reads (409/422 -> GitHubApiError CONFLICT) instead of overwriting them.
First-time creation sends no sha.

put_many() does not issue N contents writes: it stages every record in the
injected GitModule and commits once. A rejected commit is reported as
GitHubApiError with the same code a single put() would carry, CONFLICT when
another writer moved the branch first.
"""

import json
import logging
from typing import Any, Dict, List, Optional, TypeVar

import httpx
from pydantic import BaseModel

from gitgov_core.git.errors import GitRemoteError
from gitgov_core.git.git_module import GitModule
from gitgov_core.github.api import ContentsOperations, GitHubAPIClient
from gitgov_core.github.errors import GitHubApiError, GitHubApiErrorCode
from gitgov_core.github.models.types import GitHubRecordStoreOptions
from gitgov_core.record_store.record_store import (
    ConfigurationError,
    InvalidIdError,
    RecordEntry,
    RecordStore,
    validate_id,
)

logger = logging.getLogger(__name__)

V = TypeVar("V")


class GitHubWriteOpts(BaseModel):
    commit_message: Optional[str] = None


class GitHubWriteResult(BaseModel):
    commit_sha: Optional[str] = None


class GitHubRecordStore(RecordStore[V, GitHubWriteResult, GitHubWriteOpts]):
    """RecordStore persisted as JSON files in a GitHub repository."""

    def __init__(
        self,
        options: GitHubRecordStoreOptions,
        client: Optional[GitHubAPIClient] = None,
        git_module: Optional[GitModule] = None,
        token: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the store.

        Args:
            options: Repository coordinates, branch, base path, extension, encoder
            client: Pre-built API client (built from options/token otherwise)
            git_module: Git backend used by put_many for single-commit writes
            token: GitHub token when no client is passed
            http_client: Shared httpx client when no client is passed
        """
        self.owner = options.owner
        self.repo = options.repo
        self.ref = options.ref
        self.base_path = options.base_path.rstrip("/")
        self.extension = options.extension
        self.id_encoder = options.id_encoder
        self.client = client or GitHubAPIClient(
            owner=options.owner, repo=options.repo, token=token, http_client=http_client
        )
        self.contents = ContentsOperations(self.client)
        self.git_module = git_module

        # file path -> last observed blob sha
        self._sha_cache: Dict[str, str] = {}

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _validate(record_id: str) -> None:
        try:
            validate_id(record_id)
        except InvalidIdError as e:
            raise GitHubApiError(str(e), GitHubApiErrorCode.INVALID_ID) from e

    def _file_path(self, record_id: str) -> str:
        try:
            encoded = self.id_encoder.encode(record_id) if self.id_encoder else record_id
        except InvalidIdError as e:
            raise GitHubApiError(str(e), GitHubApiErrorCode.INVALID_ID) from e
        if self.base_path:
            return f"{self.base_path}/{encoded}{self.extension}"
        return f"{encoded}{self.extension}"

    @staticmethod
    def _serialize(value: Any) -> str:
        return json.dumps(value, indent=2)

    # ------------------------------------------------------------------
    # RecordStore
    # ------------------------------------------------------------------

    async def get(self, record_id: str) -> Optional[V]:
        self._validate(record_id)
        file_path = self._file_path(record_id)

        try:
            entry = await self.contents.get_contents(file_path, ref=self.ref)
        except GitHubApiError as e:
            if e.is_not_found:
                return None
            raise

        if isinstance(entry, list) or not entry.is_file:
            raise GitHubApiError(f"Not a file: {file_path}", GitHubApiErrorCode.INVALID_RESPONSE)
        if entry.content is None:
            raise GitHubApiError(
                f"File content is null (file may exceed 1MB): {file_path}",
                GitHubApiErrorCode.INVALID_RESPONSE,
            )

        self._sha_cache[file_path] = entry.sha
        try:
            return json.loads(entry.get_content())
        except json.JSONDecodeError as e:
            raise GitHubApiError(
                f"Invalid JSON in {file_path}", GitHubApiErrorCode.INVALID_RESPONSE
            ) from e

    async def put(
        self, record_id: str, value: V, opts: Optional[GitHubWriteOpts] = None
    ) -> GitHubWriteResult:
        self._validate(record_id)
        file_path = self._file_path(record_id)
        message = (opts.commit_message if opts else None) or f"put {record_id}"

        result = await self.contents.put_file(
            file_path,
            self._serialize(value),
            message,
            branch=self.ref,
            sha=self._sha_cache.get(file_path),
        )
        if result.content_sha:
            self._sha_cache[file_path] = result.content_sha
        return GitHubWriteResult(commit_sha=result.commit_sha)

    async def put_many(
        self, entries: List[RecordEntry[V]], opts: Optional[GitHubWriteOpts] = None
    ) -> GitHubWriteResult:
        """Write all entries in a single commit through the Git backend.

        Raises:
            ConfigurationError: If the store was built without a GitModule
            GitHubApiError: INVALID_ID before any staging, or the code of the
                failed commit step (CONFLICT when the branch moved)
        """
        if not entries:
            return GitHubWriteResult()

        if self.git_module is None:
            raise ConfigurationError("put_many requires a GitModule for atomic commits")

        for entry in entries:
            self._validate(entry.id)

        content_map = {
            self._file_path(entry.id): self._serialize(entry.value) for entry in entries
        }
        await self.git_module.add(list(content_map.keys()), content_map=content_map)

        message = (opts.commit_message if opts else None) or f"putMany {len(entries)} records"
        try:
            commit_sha = await self.git_module.commit(message)
        except GitRemoteError as e:
            raise GitHubApiError(str(e), GitHubApiErrorCode(e.code), e.status_code) from e

        # Blob shas changed under these paths; re-read before the next single write
        for path in content_map:
            self._sha_cache.pop(path, None)

        logger.info(f"Committed {len(entries)} records in {commit_sha[:8]}")
        return GitHubWriteResult(commit_sha=commit_sha)

    async def delete(
        self, record_id: str, opts: Optional[GitHubWriteOpts] = None
    ) -> GitHubWriteResult:
        self._validate(record_id)
        file_path = self._file_path(record_id)

        sha = self._sha_cache.get(file_path)
        if sha is None:
            try:
                entry = await self.contents.get_contents(file_path, ref=self.ref)
            except GitHubApiError as e:
                if e.is_not_found:
                    return GitHubWriteResult()
                raise
            if isinstance(entry, list) or not entry.is_file:
                return GitHubWriteResult()
            sha = entry.sha

        message = (opts.commit_message if opts else None) or f"delete {record_id}"
        try:
            result = await self.contents.delete_file(file_path, sha, message, branch=self.ref)
        except GitHubApiError as e:
            if e.is_not_found:
                self._sha_cache.pop(file_path, None)
                return GitHubWriteResult()
            raise

        self._sha_cache.pop(file_path, None)
        return GitHubWriteResult(commit_sha=result.commit_sha)

    async def list(self) -> List[str]:
        try:
            entries = await self.contents.get_contents(self.base_path, ref=self.ref)
        except GitHubApiError as e:
            if e.is_not_found:
                return []
            raise

        if not isinstance(entries, list):
            return []

        ids = [
            entry.name[:len(entry.name) - len(self.extension)]
            for entry in entries
            if entry.name.endswith(self.extension)
        ]
        if self.id_encoder:
            return [self.id_encoder.decode(i) for i in ids]
        return ids

    async def exists(self, record_id: str) -> bool:
        self._validate(record_id)
        try:
            await self.contents.get_contents(self._file_path(record_id), ref=self.ref)
            return True
        except GitHubApiError as e:
            if e.is_not_found:
                return False
            raise
