"""
Git Module Interface

Backend-agnostic contract for every Git operation the record store needs.
Three independent implementations exist:

- LocalGitModule: drives the git executable through an injected executor
- MemoryGitModule: deterministic in-memory state machine for tests
- GitHubGitModule: rebuilds blobs, trees, commits and refs over the REST API

USAGE NOTES:
- Every method is a coroutine.
- A handle keeps mutable state (active branch, staging buffer); do not share
  one handle between concurrent callers.
- get_commit_hash() returns a 40-char lowercase hex input unchanged, on every
  backend, without touching the repository.
- Failures are raised as members of gitgov_core.git.errors.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from gitgov_core.git.types import (
    ChangedFile,
    CommitAuthor,
    CommitInfo,
    ExecOptions,
    ExecResult,
    GetCommitHistoryOptions,
)


class GitModule(ABC):
    """Abstract Git operations handle."""

    # ------------------------------------------------------------------
    # Raw / init
    # ------------------------------------------------------------------

    @abstractmethod
    async def exec(
        self, command: str, args: List[str], options: Optional[ExecOptions] = None
    ) -> ExecResult:
        """Run a raw command against the repository, if the backend allows it."""
        pass

    @abstractmethod
    async def init(self) -> None:
        """Initialise a new repository."""
        pass

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    @abstractmethod
    async def get_repo_root(self) -> str:
        pass

    @abstractmethod
    async def get_current_branch(self) -> str:
        """
        Get the active branch name.

        Raises:
            GitCommandError: If HEAD is detached or cannot be resolved
        """
        pass

    @abstractmethod
    async def get_commit_hash(self, ref: str = "HEAD") -> str:
        """
        Resolve a ref expression to a commit hash.

        Args:
            ref: Branch name, HEAD, abbreviated or full hash

        Returns:
            Commit hash (``ref`` itself when it is already a full hash)
        """
        pass

    @abstractmethod
    async def set_config(self, key: str, value: str, scope: str = "local") -> None:
        pass

    @abstractmethod
    async def get_merge_base(self, branch_a: str, branch_b: str) -> str:
        pass

    @abstractmethod
    async def get_changed_files(
        self, from_commit: str, to_commit: str, path_filter: str
    ) -> List[ChangedFile]:
        """
        List files changed between two commits.

        Args:
            from_commit: Base commit or ref
            to_commit: Target commit or ref
            path_filter: Only report paths under this prefix

        Returns:
            ChangedFile entries with status A, M or D
        """
        pass

    @abstractmethod
    async def get_staged_files(self) -> List[str]:
        pass

    @abstractmethod
    async def get_file_content(self, commit_hash: str, file_path: str) -> str:
        """
        Read a file as it exists in a commit.

        Raises:
            GitFileNotFoundError: If the file is absent from that commit
        """
        pass

    @abstractmethod
    async def get_commit_history(
        self, branch: str, options: Optional[GetCommitHistoryOptions] = None
    ) -> List[CommitInfo]:
        """Return commits reachable from ``branch``, newest first."""
        pass

    @abstractmethod
    async def get_commit_history_range(
        self,
        from_hash: str,
        to_hash: str,
        options: Optional[GetCommitHistoryOptions] = None,
    ) -> List[CommitInfo]:
        """Return commits in ``from_hash..to_hash``, newest first."""
        pass

    @abstractmethod
    async def get_commit_message(self, commit_hash: str) -> str:
        pass

    @abstractmethod
    async def has_uncommitted_changes(self, path_filter: Optional[str] = None) -> bool:
        pass

    @abstractmethod
    async def is_rebase_in_progress(self) -> bool:
        pass

    @abstractmethod
    async def branch_exists(self, branch_name: str) -> bool:
        pass

    @abstractmethod
    async def list_remote_branches(self, remote_name: str) -> List[str]:
        pass

    @abstractmethod
    async def is_remote_configured(self, remote_name: str) -> bool:
        pass

    @abstractmethod
    async def get_branch_remote(self, branch_name: str) -> Optional[str]:
        pass

    @abstractmethod
    async def get_conflicted_files(self) -> List[str]:
        pass

    # ------------------------------------------------------------------
    # Write operations
    # ------------------------------------------------------------------

    @abstractmethod
    async def checkout_branch(self, branch_name: str) -> None:
        pass

    @abstractmethod
    async def stash(self, message: Optional[str] = None) -> Optional[str]:
        """
        Stash uncommitted changes.

        Returns:
            Stash commit hash, or None when there was nothing to stash
        """
        pass

    @abstractmethod
    async def stash_pop(self) -> bool:
        """Apply and drop the latest stash. Returns False when none exists."""
        pass

    @abstractmethod
    async def stash_drop(self, stash_hash: Optional[str] = None) -> None:
        pass

    @abstractmethod
    async def checkout_orphan_branch(self, branch_name: str) -> None:
        pass

    @abstractmethod
    async def fetch(self, remote: str) -> None:
        pass

    @abstractmethod
    async def pull(self, remote: str, branch_name: str) -> None:
        """
        Merge the remote branch into the current branch.

        Raises:
            MergeConflictError: With the list of conflicted paths
        """
        pass

    @abstractmethod
    async def pull_rebase(self, remote: str, branch_name: str) -> None:
        """
        Rebase the current branch onto the remote branch.

        Raises:
            RebaseConflictError: With the list of conflicted paths
        """
        pass

    @abstractmethod
    async def reset_hard(self, target: str) -> None:
        pass

    @abstractmethod
    async def checkout_files_from_branch(
        self, source_branch: str, file_paths: List[str]
    ) -> None:
        pass

    @abstractmethod
    async def add(
        self,
        file_paths: List[str],
        force: bool = False,
        content_map: Optional[Dict[str, str]] = None,
    ) -> None:
        """
        Stage paths for the next commit.

        Args:
            file_paths: Paths relative to the repository root
            force: Stage ignored files too
            content_map: Literal contents to stage for some or all paths
        """
        pass

    @abstractmethod
    async def rm(self, file_paths: List[str]) -> None:
        pass

    @abstractmethod
    async def commit(self, message: str, author: Optional[CommitAuthor] = None) -> str:
        """
        Commit staged changes.

        Returns:
            Hash of the new commit
        """
        pass

    @abstractmethod
    async def commit_allow_empty(
        self, message: str, author: Optional[CommitAuthor] = None
    ) -> str:
        pass

    @abstractmethod
    async def push(self, remote: str, branch_name: str) -> None:
        pass

    @abstractmethod
    async def push_with_upstream(self, remote: str, branch_name: str) -> None:
        pass

    @abstractmethod
    async def set_upstream(
        self, branch_name: str, remote: str, remote_branch: str
    ) -> None:
        pass

    # ------------------------------------------------------------------
    # Rebase / branch operations
    # ------------------------------------------------------------------

    @abstractmethod
    async def rebase_continue(self) -> str:
        """
        Continue a paused rebase.

        Returns:
            Hash of HEAD after the rebase step

        Raises:
            RebaseNotInProgressError: If no rebase is paused
        """
        pass

    @abstractmethod
    async def rebase_abort(self) -> None:
        pass

    @abstractmethod
    async def create_branch(
        self, branch_name: str, start_point: Optional[str] = None
    ) -> None:
        """
        Create a branch.

        Raises:
            BranchAlreadyExistsError: If the name is taken
        """
        pass

    @abstractmethod
    async def rebase(self, target_branch: str) -> None:
        """
        Rebase the current branch onto ``target_branch``.

        Raises:
            RebaseConflictError: With the list of conflicted paths
        """
        pass
