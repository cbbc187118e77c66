"""ConfigStore over the GitHub contents API."""

import json
import logging
from typing import Optional

import httpx
from pydantic import BaseModel

from common.config.config import CONFIG_FILE_NAME
from gitgov_core.config_store.config_store import ConfigStore, GitGovConfig
from gitgov_core.github.api import ContentsOperations, GitHubAPIClient
from gitgov_core.github.errors import GitHubApiError
from gitgov_core.github.models.types import GitHubConfigStoreOptions

logger = logging.getLogger(__name__)

SAVE_COMMIT_MESSAGE = "chore(config): update gitgov config.json"


class GitHubSaveResult(BaseModel):
    commit_sha: Optional[str] = None


class GitHubConfigStore(ConfigStore[GitHubSaveResult]):
    """Reads and writes ``<base_path>/config.json`` on one branch.

    The blob sha from the last load/save is sent with the next save, so a
    concurrent edit surfaces as GitHubApiError CONFLICT.
    """

    def __init__(
        self,
        options: GitHubConfigStoreOptions,
        client: Optional[GitHubAPIClient] = None,
        token: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.ref = options.ref
        self.config_path = f"{options.base_path.rstrip('/')}/{CONFIG_FILE_NAME}"
        self.client = client or GitHubAPIClient(
            owner=options.owner, repo=options.repo, token=token, http_client=http_client
        )
        self.contents = ContentsOperations(self.client)
        self._cached_sha: Optional[str] = None

    async def load_config(self) -> Optional[GitGovConfig]:
        """Load the config; None when absent or not valid JSON.

        Raises:
            GitHubApiError: PERMISSION_DENIED, SERVER_ERROR or NETWORK_ERROR
        """
        try:
            entry = await self.contents.get_contents(self.config_path, ref=self.ref)
        except GitHubApiError as e:
            if e.is_not_found:
                return None
            raise

        if isinstance(entry, list):
            return None

        self._cached_sha = entry.sha
        if not entry.content:
            return None

        try:
            return json.loads(entry.get_content())
        except (GitHubApiError, ValueError) as e:
            logger.warning(f"Ignoring invalid config at {self.config_path}: {e}")
            return None

    async def save_config(self, config: GitGovConfig) -> GitHubSaveResult:
        result = await self.contents.put_file(
            self.config_path,
            json.dumps(config, indent=2),
            SAVE_COMMIT_MESSAGE,
            branch=self.ref,
            sha=self._cached_sha,
        )
        if result.content_sha:
            self._cached_sha = result.content_sha
        return GitHubSaveResult(commit_sha=result.commit_sha)
