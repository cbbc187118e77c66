"""
Git backend over the GitHub REST API.

There is no working copy: staged changes live in an in-memory buffer and a
commit is assembled from Git objects through a fixed, ordered transaction:

1. GET   git/ref/heads/<branch>   current commit sha
2. GET   git/commits/<sha>        its tree sha
3. POST  git/blobs                one per staged upsert (deletions need none)
4. POST  git/trees                base_tree + one entry per staged path
5. POST  git/commits              new tree, previous commit as sole parent
6. PATCH git/refs/heads/<branch>  fast-forward only; a rejection means the
                                  branch moved since step 1 and surfaces
                                  as ConcurrentUpdateError

Any failing step aborts the transaction and leaves the buffer untouched.

The active branch is client-side state: checkout_branch() only moves the
cursor and does not verify the branch on the server.
"""

import logging
from typing import Dict, List, Optional

import httpx

from common.constants import COMPARE_STATUS_MAP
from gitgov_core.git.errors import (
    BranchAlreadyExistsError,
    BranchNotFoundError,
    ConcurrentUpdateError,
    GitFileNotFoundError,
    GitRemoteError,
    NothingToCommitError,
    OperationNotSupportedError,
)
from gitgov_core.git.git_module import GitModule
from gitgov_core.git.types import (
    ChangedFile,
    ChangeStatus,
    CommitAuthor,
    CommitInfo,
    ExecOptions,
    ExecResult,
    GetCommitHistoryOptions,
    is_full_commit_hash,
)
from gitgov_core.github.api import (
    ContentsOperations,
    GitDataOperations,
    GitHubAPIClient,
    RepositoryOperations,
)
from gitgov_core.github.errors import GitHubApiError, GitHubApiErrorCode
from gitgov_core.github.models.types import (
    CommitSummary,
    GitHubGitModuleOptions,
    TreeEntry,
)

logger = logging.getLogger(__name__)

BACKEND_NAME = "the GitHub API backend"


def _to_commit_info(summary: CommitSummary) -> CommitInfo:
    return CommitInfo(
        hash=summary.sha,
        message=summary.message,
        author=summary.author,
        date=summary.date,
    )


class GitHubGitModule(GitModule):
    """GitModule that talks to a GitHub repository."""

    def __init__(
        self,
        options: GitHubGitModuleOptions,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the GitHub backend.

        Args:
            options: Repository coordinates, token and default branch
            http_client: Optional shared httpx client (tests inject one
                backed by httpx.MockTransport)
        """
        self.owner = options.owner
        self.repo = options.repo
        self.default_branch = options.default_branch

        self.client = GitHubAPIClient(
            owner=options.owner,
            repo=options.repo,
            token=options.token,
            base_url=options.api_base_url,
            http_client=http_client,
        )
        self.git_data = GitDataOperations(self.client)
        self.repositories = RepositoryOperations(self.client)
        self.contents = ContentsOperations(self.client)

        # path -> content, or None for a staged deletion
        self._staging_buffer: Dict[str, Optional[str]] = {}
        self._active_ref = options.default_branch

    # ------------------------------------------------------------------
    # Error translation
    # ------------------------------------------------------------------

    @staticmethod
    def _translate(error: GitHubApiError, operation: str) -> GitRemoteError:
        if error.code == GitHubApiErrorCode.PERMISSION_DENIED:
            message = f"GitHub authentication/permission error during {operation}: {error}"
        elif error.code == GitHubApiErrorCode.NETWORK_ERROR:
            message = f"GitHub network error during {operation}: {error}"
        else:
            message = f"GitHub API error during {operation}: {error}"
        return GitRemoteError(
            message,
            code=error.code,
            status_code=error.status_code,
            command=operation,
            stderr=str(error),
        )

    def _not_supported(self, operation: str) -> OperationNotSupportedError:
        return OperationNotSupportedError(operation, BACKEND_NAME)

    async def _resolve_branch_sha(self, branch: str) -> str:
        try:
            ref = await self.git_data.get_ref(branch)
        except GitHubApiError as e:
            if e.is_not_found:
                raise BranchNotFoundError(branch) from e
            raise self._translate(e, f"getRef {branch}") from e
        return ref.sha

    # ------------------------------------------------------------------
    # Raw / init
    # ------------------------------------------------------------------

    async def exec(
        self, command: str, args: List[str], options: Optional[ExecOptions] = None
    ) -> ExecResult:
        return ExecResult(exit_code=1, stdout="", stderr="exec() not supported in GitHub API mode")

    async def init(self) -> None:
        pass

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    async def get_repo_root(self) -> str:
        return f"github://{self.owner}/{self.repo}"

    async def get_current_branch(self) -> str:
        return self._active_ref

    async def get_commit_hash(self, ref: str = "HEAD") -> str:
        """Resolve a ref to a full commit sha.

        "HEAD" is the active branch. Any other ref is tried as a branch name
        first, then through the commits endpoint, which also resolves tags
        and abbreviated hashes.
        """
        if is_full_commit_hash(ref):
            return ref
        if ref == "HEAD":
            return await self._resolve_branch_sha(self._active_ref)

        try:
            return await self._resolve_branch_sha(ref)
        except BranchNotFoundError as not_a_branch:
            try:
                commit = await self.repositories.get_commit(ref)
            except GitHubApiError as e:
                if e.is_not_found or e.status_code == 422:
                    raise not_a_branch from e
                raise self._translate(e, f"getCommit {ref}") from e
        return commit.sha

    async def set_config(self, key: str, value: str, scope: str = "local") -> None:
        pass

    async def get_merge_base(self, branch_a: str, branch_b: str) -> str:
        raise self._not_supported("get_merge_base")

    async def get_changed_files(
        self, from_commit: str, to_commit: str, path_filter: str
    ) -> List[ChangedFile]:
        try:
            comparison = await self.repositories.compare(from_commit, to_commit)
        except GitHubApiError as e:
            raise self._translate(e, f"compare {from_commit}...{to_commit}") from e

        changes: List[ChangedFile] = []
        for entry in comparison.files:
            if entry.status == "renamed":
                if entry.previous_filename:
                    changes.append(ChangedFile(status=ChangeStatus.DELETED.value, file=entry.previous_filename))
                changes.append(ChangedFile(status=ChangeStatus.ADDED.value, file=entry.filename))
            else:
                status = COMPARE_STATUS_MAP.get(entry.status, ChangeStatus.MODIFIED.value)
                changes.append(ChangedFile(status=status, file=entry.filename))

        if path_filter:
            changes = [c for c in changes if c.file.startswith(path_filter)]
        return changes

    async def get_staged_files(self) -> List[str]:
        return list(self._staging_buffer.keys())

    async def get_file_content(self, commit_hash: str, file_path: str) -> str:
        operation = f"getContent {file_path}@{commit_hash}"
        try:
            entry = await self.contents.get_contents(file_path, ref=commit_hash)
            if isinstance(entry, list) or not entry.is_file:
                raise GitRemoteError(
                    f"Not a file: {file_path}",
                    code=GitHubApiErrorCode.INVALID_RESPONSE,
                    command=operation,
                )

            content = entry.get_content()
            if content is None:
                # Contents API withholds bodies of large files
                logger.debug(f"Content withheld for {file_path}, fetching blob {entry.sha[:8]}")
                content = await self.git_data.get_blob(entry.sha)
            return content
        except GitHubApiError as e:
            if e.is_not_found:
                raise GitFileNotFoundError(file_path, commit_hash) from e
            raise self._translate(e, operation) from e

    async def get_commit_history(
        self, branch: str, options: Optional[GetCommitHistoryOptions] = None
    ) -> List[CommitInfo]:
        options = options or GetCommitHistoryOptions()
        try:
            commits = await self.repositories.list_commits(
                branch, max_count=options.max_count, path=options.path_filter
            )
        except GitHubApiError as e:
            if e.is_not_found:
                raise BranchNotFoundError(branch) from e
            raise self._translate(e, f"listCommits {branch}") from e

        return [_to_commit_info(c) for c in commits]

    async def get_commit_history_range(
        self,
        from_hash: str,
        to_hash: str,
        options: Optional[GetCommitHistoryOptions] = None,
    ) -> List[CommitInfo]:
        options = options or GetCommitHistoryOptions()
        try:
            comparison = await self.repositories.compare(from_hash, to_hash)
        except GitHubApiError as e:
            raise self._translate(e, f"compare {from_hash}...{to_hash}") from e

        if options.path_filter and not any(
            f.filename.startswith(options.path_filter) for f in comparison.files
        ):
            return []

        # compare lists commits oldest first
        commits = list(reversed(comparison.commits))
        if options.max_count:
            commits = commits[:options.max_count]
        return [_to_commit_info(c) for c in commits]

    async def get_commit_message(self, commit_hash: str) -> str:
        try:
            commit = await self.repositories.get_commit(commit_hash)
        except GitHubApiError as e:
            raise self._translate(e, f"getCommit {commit_hash}") from e
        return commit.message

    async def has_uncommitted_changes(self, path_filter: Optional[str] = None) -> bool:
        if path_filter:
            return any(p.startswith(path_filter) for p in self._staging_buffer)
        return bool(self._staging_buffer)

    async def is_rebase_in_progress(self) -> bool:
        return False

    async def branch_exists(self, branch_name: str) -> bool:
        try:
            await self.repositories.get_branch(branch_name)
            return True
        except GitHubApiError as e:
            if e.is_not_found:
                return False
            raise self._translate(e, f"getBranch {branch_name}") from e

    async def list_remote_branches(self, remote_name: str) -> List[str]:
        try:
            return await self.repositories.list_branches()
        except GitHubApiError as e:
            raise self._translate(e, "listBranches") from e

    async def is_remote_configured(self, remote_name: str) -> bool:
        return True

    async def get_branch_remote(self, branch_name: str) -> Optional[str]:
        return "origin"

    async def get_conflicted_files(self) -> List[str]:
        return []

    # ------------------------------------------------------------------
    # Write operations
    # ------------------------------------------------------------------

    async def checkout_branch(self, branch_name: str) -> None:
        self._active_ref = branch_name

    async def stash(self, message: Optional[str] = None) -> Optional[str]:
        return None

    async def stash_pop(self) -> bool:
        return False

    async def stash_drop(self, stash_hash: Optional[str] = None) -> None:
        pass

    async def checkout_orphan_branch(self, branch_name: str) -> None:
        raise self._not_supported("checkout_orphan_branch")

    async def fetch(self, remote: str) -> None:
        pass

    async def pull(self, remote: str, branch_name: str) -> None:
        pass

    async def pull_rebase(self, remote: str, branch_name: str) -> None:
        pass

    async def reset_hard(self, target: str) -> None:
        raise self._not_supported("reset_hard")

    async def checkout_files_from_branch(
        self, source_branch: str, file_paths: List[str]
    ) -> None:
        raise self._not_supported("checkout_files_from_branch")

    async def add(
        self,
        file_paths: List[str],
        force: bool = False,
        content_map: Optional[Dict[str, str]] = None,
    ) -> None:
        """Stage paths; content comes from ``content_map`` or the active branch."""
        content_map = content_map or {}
        paths = list(file_paths) + [p for p in content_map if p not in file_paths]
        for path in paths:
            if path in content_map:
                content = content_map[path]
            else:
                content = await self.get_file_content(self._active_ref, path)
            self._staging_buffer[path] = content

    async def rm(self, file_paths: List[str]) -> None:
        for path in file_paths:
            self._staging_buffer[path] = None

    async def commit(self, message: str, author: Optional[CommitAuthor] = None) -> str:
        if not self._staging_buffer:
            raise NothingToCommitError()
        return await self._commit_transaction(message, author)

    async def commit_allow_empty(
        self, message: str, author: Optional[CommitAuthor] = None
    ) -> str:
        return await self._commit_transaction(message, author)

    async def _commit_transaction(
        self, message: str, author: Optional[CommitAuthor]
    ) -> str:
        branch = self._active_ref
        step = "getRef"
        try:
            # 1. current commit of the branch
            ref = await self.git_data.get_ref(branch)
            parent_sha = ref.sha

            # 2. its tree
            step = "getCommit"
            parent = await self.git_data.get_commit(parent_sha)
            tree_sha = parent.tree_sha

            if self._staging_buffer:
                # 3. one blob per upsert
                step = "createBlob"
                entries: List[TreeEntry] = []
                for path, content in self._staging_buffer.items():
                    if content is None:
                        entries.append(TreeEntry(path=path, sha=None))
                    else:
                        blob_sha = await self.git_data.create_blob(content)
                        entries.append(TreeEntry(path=path, sha=blob_sha))

                # 4. tree on top of the previous one
                step = "createTree"
                tree_sha = await self.git_data.create_tree(entries, base_tree=parent.tree_sha)

            # 5. commit
            step = "createCommit"
            author_data = {"name": author.name, "email": author.email} if author else None
            new_commit = await self.git_data.create_commit(
                message, tree_sha, [parent_sha], author=author_data
            )

            # 6. fast-forward the branch
            step = "updateRef"
            await self.git_data.update_ref(branch, new_commit.sha, force=False)
        except GitHubApiError as e:
            if step == "getRef" and e.is_not_found:
                raise BranchNotFoundError(branch) from e
            if step == "updateRef" and e.code == GitHubApiErrorCode.CONFLICT:
                raise ConcurrentUpdateError(branch, e.code, e.status_code) from e
            raise self._translate(e, f"commit ({step})") from e

        self._staging_buffer.clear()
        logger.info(f"Committed {new_commit.sha[:8]} to {self.owner}/{self.repo}@{branch}")
        return new_commit.sha

    async def push(self, remote: str, branch_name: str) -> None:
        pass

    async def push_with_upstream(self, remote: str, branch_name: str) -> None:
        pass

    async def set_upstream(
        self, branch_name: str, remote: str, remote_branch: str
    ) -> None:
        pass

    # ------------------------------------------------------------------
    # Rebase / branch operations
    # ------------------------------------------------------------------

    async def rebase_continue(self) -> str:
        raise self._not_supported("rebase_continue")

    async def rebase_abort(self) -> None:
        pass

    async def create_branch(
        self, branch_name: str, start_point: Optional[str] = None
    ) -> None:
        sha = await self.get_commit_hash(start_point or self._active_ref)
        try:
            await self.git_data.create_ref(branch_name, sha)
        except GitHubApiError as e:
            if e.status_code == 422:
                raise BranchAlreadyExistsError(branch_name) from e
            raise self._translate(e, f"createRef {branch_name}") from e
        self._active_ref = branch_name

    async def rebase(self, target_branch: str) -> None:
        raise self._not_supported("rebase")
