"""
In-memory Git backend.

A deterministic state machine implementing GitModule without touching disk or
network. Used as a hermetic test double: besides the GitModule surface it
exposes setup helpers (set_branch, set_commits, set_files, ...) that tests use
to build fixtures.

Simplifications:
- The file map is global; checking out another branch does not swap it.
- rebase() never computes conflicts; it only enters the "in progress" state
  when conflicted files were seeded with set_rebase_in_progress().
"""

import copy
import hashlib
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Set

from common.constants import (
    MEMORY_DEFAULT_AUTHOR,
    MEMORY_PLACEHOLDER_HASH,
    MEMORY_REPO_ROOT,
)
from gitgov_core.git.errors import (
    BranchAlreadyExistsError,
    BranchNotFoundError,
    GitFileNotFoundError,
    RebaseNotInProgressError,
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

logger = logging.getLogger(__name__)

DEFAULT_BRANCH = "main"
DEFAULT_REMOTE = "origin"


@dataclass
class MemoryCommit:
    hash: str
    message: str
    author: str
    date: str
    branch: str
    parent: Optional[str] = None
    files: Dict[str, str] = field(default_factory=dict)

    def to_info(self) -> CommitInfo:
        return CommitInfo(hash=self.hash, message=self.message, author=self.author, date=self.date)


@dataclass
class MemoryStash:
    hash: str
    message: str
    files: Dict[str, str]


@dataclass
class MemoryGitState:
    repo_root: str
    current_branch: str = DEFAULT_BRANCH
    # branch name -> head commit hash (None for a branch without commits)
    branches: Dict[str, Optional[str]] = field(default_factory=lambda: {DEFAULT_BRANCH: None})
    commits: List[MemoryCommit] = field(default_factory=list)
    staged_files: List[str] = field(default_factory=list)
    files: Dict[str, str] = field(default_factory=dict)
    rebase_in_progress: bool = False
    conflicted_files: List[str] = field(default_factory=list)
    remotes: Dict[str, List[str]] = field(default_factory=lambda: {DEFAULT_REMOTE: [DEFAULT_BRANCH]})
    stashes: List[MemoryStash] = field(default_factory=list)
    config: Dict[str, str] = field(default_factory=dict)
    sequence: int = 0


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class MemoryGitModule(GitModule):
    """GitModule kept entirely in process memory."""

    def __init__(self, repo_root: str = MEMORY_REPO_ROOT):
        self._state = MemoryGitState(repo_root=repo_root)

    # ------------------------------------------------------------------
    # Test helpers
    # ------------------------------------------------------------------

    def set_branch(self, name: str) -> None:
        self._state.branches.setdefault(name, self._head_of(self._state.current_branch))
        self._state.current_branch = name

    def set_branches(self, names: List[str]) -> None:
        old = self._state.branches
        self._state.branches = {name: old.get(name) for name in names}
        if self._state.current_branch not in self._state.branches:
            self._state.current_branch = names[0] if names else DEFAULT_BRANCH
            self._state.branches.setdefault(self._state.current_branch, None)

    def set_commits(self, commits: List[CommitInfo]) -> None:
        """Replace history with ``commits`` (oldest first) on the current branch."""
        branch = self._state.current_branch
        parent = None
        self._state.commits = []
        for info in commits:
            self._state.commits.append(
                MemoryCommit(
                    hash=info.hash,
                    message=info.message,
                    author=info.author,
                    date=info.date,
                    branch=branch,
                    parent=parent,
                )
            )
            parent = info.hash
        self._state.branches[branch] = parent

    def set_files(self, files: Dict[str, str]) -> None:
        self._state.files = dict(files)

    def set_file_content(self, commit_hash: str, file_path: str, content: str) -> None:
        commit = self._find_commit(commit_hash)
        if commit:
            commit.files[file_path] = content
        self._state.files[file_path] = content

    def set_staged_files(self, files: List[str]) -> None:
        self._state.staged_files = list(files)

    def set_rebase_in_progress(
        self, in_progress: bool, conflicted_files: Optional[List[str]] = None
    ) -> None:
        self._state.rebase_in_progress = in_progress
        self._state.conflicted_files = list(conflicted_files or [])

    def set_remote_branches(self, remote: str, branches: List[str]) -> None:
        self._state.remotes[remote] = list(branches)

    def clear(self) -> None:
        self._state = MemoryGitState(repo_root=self._state.repo_root)

    # ------------------------------------------------------------------
    # Internal lookups
    # ------------------------------------------------------------------

    def _find_commit(self, commit_hash: str) -> Optional[MemoryCommit]:
        for commit in self._state.commits:
            if commit.hash == commit_hash:
                return commit
        return None

    def _head_of(self, branch: str) -> Optional[str]:
        return self._state.branches.get(branch)

    def _resolve(self, ref: str) -> Optional[MemoryCommit]:
        return self._find_commit(self._resolve_hash(ref))

    def _resolve_hash(self, ref: str) -> str:
        if is_full_commit_hash(ref):
            return ref
        if ref == "HEAD":
            head = self._head_of(self._state.current_branch)
            if head:
                return head
            if self._state.commits:
                return self._state.commits[-1].hash
            return MEMORY_PLACEHOLDER_HASH
        if self._state.branches.get(ref):
            return self._state.branches[ref]
        for commit in self._state.commits:
            if commit.hash.startswith(ref):
                return commit.hash
        return ref

    def _ancestry(self, commit_hash: Optional[str]) -> List[MemoryCommit]:
        """Walk first parents from ``commit_hash``, newest first."""
        chain = []
        seen: Set[str] = set()
        current = self._find_commit(commit_hash) if commit_hash else None
        while current and current.hash not in seen:
            chain.append(current)
            seen.add(current.hash)
            current = self._find_commit(current.parent) if current.parent else None
        return chain

    def _changed_paths(self, commit: MemoryCommit) -> List[str]:
        parent = self._find_commit(commit.parent) if commit.parent else None
        before = parent.files if parent else {}
        return [c.file for c in self._diff(before, commit.files, "")]

    @staticmethod
    def _diff(before: Dict[str, str], after: Dict[str, str], path_filter: str) -> List[ChangedFile]:
        changes = []
        for path in sorted(set(before) | set(after)):
            if path_filter and not path.startswith(path_filter):
                continue
            if path not in before:
                changes.append(ChangedFile(status=ChangeStatus.ADDED.value, file=path))
            elif path not in after:
                changes.append(ChangedFile(status=ChangeStatus.DELETED.value, file=path))
            elif before[path] != after[path]:
                changes.append(ChangedFile(status=ChangeStatus.MODIFIED.value, file=path))
        return changes

    def _filter_history(
        self, commits: List[MemoryCommit], options: Optional[GetCommitHistoryOptions]
    ) -> List[CommitInfo]:
        if options and options.path_filter:
            prefix = options.path_filter
            commits = [
                c for c in commits
                if any(p.startswith(prefix) for p in self._changed_paths(c))
            ]
        if options and options.max_count:
            commits = commits[:options.max_count]
        return [c.to_info() for c in commits]

    def _next_hash(self, *parts: str) -> str:
        self._state.sequence += 1
        payload = "\n".join(list(parts) + [str(self._state.sequence)])
        return hashlib.sha1(payload.encode("utf-8")).hexdigest()

    def _require_branch(self, branch_name: str) -> None:
        if branch_name not in self._state.branches:
            raise BranchNotFoundError(branch_name)

    # ------------------------------------------------------------------
    # Raw / init
    # ------------------------------------------------------------------

    async def exec(
        self, command: str, args: List[str], options: Optional[ExecOptions] = None
    ) -> ExecResult:
        return ExecResult(exit_code=0, stdout="", stderr="")

    async def init(self) -> None:
        self._state.branches.setdefault(DEFAULT_BRANCH, None)
        self._state.current_branch = DEFAULT_BRANCH

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    async def get_repo_root(self) -> str:
        return self._state.repo_root

    async def get_current_branch(self) -> str:
        return self._state.current_branch

    async def get_commit_hash(self, ref: str = "HEAD") -> str:
        return self._resolve_hash(ref)

    async def set_config(self, key: str, value: str, scope: str = "local") -> None:
        self._state.config[key] = value

    async def get_merge_base(self, branch_a: str, branch_b: str) -> str:
        self._require_branch(branch_a)
        self._require_branch(branch_b)

        ancestors_a = {c.hash for c in self._ancestry(self._head_of(branch_a))}
        for commit in self._ancestry(self._head_of(branch_b)):
            if commit.hash in ancestors_a:
                return commit.hash
        if self._state.commits:
            return self._state.commits[0].hash
        return MEMORY_PLACEHOLDER_HASH

    async def get_changed_files(
        self, from_commit: str, to_commit: str, path_filter: str
    ) -> List[ChangedFile]:
        before = self._resolve(from_commit)
        after = self._resolve(to_commit)
        return self._diff(
            before.files if before else {},
            after.files if after else {},
            path_filter,
        )

    async def get_staged_files(self) -> List[str]:
        return list(self._state.staged_files)

    async def get_file_content(self, commit_hash: str, file_path: str) -> str:
        commit = self._resolve(commit_hash)
        if commit and file_path in commit.files:
            return commit.files[file_path]
        if file_path in self._state.files:
            return self._state.files[file_path]
        raise GitFileNotFoundError(file_path, commit_hash)

    async def get_commit_history(
        self, branch: str, options: Optional[GetCommitHistoryOptions] = None
    ) -> List[CommitInfo]:
        return self._filter_history(self._ancestry(self._resolve_hash(branch)), options)

    async def get_commit_history_range(
        self,
        from_hash: str,
        to_hash: str,
        options: Optional[GetCommitHistoryOptions] = None,
    ) -> List[CommitInfo]:
        start = self._resolve_hash(from_hash)
        commits = []
        for commit in self._ancestry(self._resolve_hash(to_hash)):
            if commit.hash == start:
                return self._filter_history(commits, options)
            commits.append(commit)
        return []

    async def get_commit_message(self, commit_hash: str) -> str:
        commit = self._resolve(commit_hash)
        return commit.message if commit else ""

    async def has_uncommitted_changes(self, path_filter: Optional[str] = None) -> bool:
        if path_filter:
            return any(p.startswith(path_filter) for p in self._state.staged_files)
        return bool(self._state.staged_files)

    async def is_rebase_in_progress(self) -> bool:
        return self._state.rebase_in_progress

    async def branch_exists(self, branch_name: str) -> bool:
        return branch_name in self._state.branches

    async def list_remote_branches(self, remote_name: str) -> List[str]:
        return list(self._state.remotes.get(remote_name, []))

    async def is_remote_configured(self, remote_name: str) -> bool:
        return remote_name in self._state.remotes

    async def get_branch_remote(self, branch_name: str) -> Optional[str]:
        self._require_branch(branch_name)
        for remote, branches in self._state.remotes.items():
            if branch_name in branches:
                return remote
        return None

    async def get_conflicted_files(self) -> List[str]:
        return list(self._state.conflicted_files)

    # ------------------------------------------------------------------
    # Write operations
    # ------------------------------------------------------------------

    async def checkout_branch(self, branch_name: str) -> None:
        self._require_branch(branch_name)
        self._state.current_branch = branch_name

    async def stash(self, message: Optional[str] = None) -> Optional[str]:
        if not self._state.staged_files:
            return None
        stash_hash = self._next_hash("stash", message or "WIP")
        self._state.stashes.append(
            MemoryStash(hash=stash_hash, message=message or "WIP", files=dict(self._state.files))
        )
        self._state.staged_files = []
        return stash_hash

    async def stash_pop(self) -> bool:
        if not self._state.stashes:
            return False
        stash = self._state.stashes.pop()
        self._state.files.update(stash.files)
        return True

    async def stash_drop(self, stash_hash: Optional[str] = None) -> None:
        if not self._state.stashes:
            return
        if stash_hash:
            self._state.stashes = [s for s in self._state.stashes if s.hash != stash_hash]
        else:
            self._state.stashes.pop()

    async def checkout_orphan_branch(self, branch_name: str) -> None:
        self._state.branches[branch_name] = None
        self._state.current_branch = branch_name

    async def fetch(self, remote: str) -> None:
        pass

    async def pull(self, remote: str, branch_name: str) -> None:
        pass

    async def pull_rebase(self, remote: str, branch_name: str) -> None:
        pass

    async def reset_hard(self, target: str) -> None:
        self._state.staged_files = []
        commit = self._resolve(target)
        if commit:
            self._state.branches[self._state.current_branch] = commit.hash
            self._state.files = dict(commit.files)

    async def checkout_files_from_branch(
        self, source_branch: str, file_paths: List[str]
    ) -> None:
        self._require_branch(source_branch)
        commit = self._resolve(source_branch)
        if not commit:
            return
        for path in file_paths:
            if path in commit.files:
                self._state.files[path] = commit.files[path]

    async def add(
        self,
        file_paths: List[str],
        force: bool = False,
        content_map: Optional[Dict[str, str]] = None,
    ) -> None:
        content_map = content_map or {}
        paths = list(file_paths) + [p for p in content_map if p not in file_paths]
        for path in paths:
            if path in content_map:
                self._state.files[path] = content_map[path]
            if path not in self._state.staged_files:
                self._state.staged_files.append(path)

    async def rm(self, file_paths: List[str]) -> None:
        for path in file_paths:
            self._state.files.pop(path, None)
            if path not in self._state.staged_files:
                self._state.staged_files.append(path)

    async def commit(self, message: str, author: Optional[CommitAuthor] = None) -> str:
        branch = self._state.current_branch
        parent = self._head_of(branch)
        commit_hash = self._next_hash(parent or "", branch, message)

        self._state.commits.append(
            MemoryCommit(
                hash=commit_hash,
                message=message,
                author=str(author) if author else MEMORY_DEFAULT_AUTHOR,
                date=_utc_now(),
                branch=branch,
                parent=parent,
                files=copy.deepcopy(self._state.files),
            )
        )
        self._state.branches[branch] = commit_hash
        self._state.staged_files = []
        logger.debug(f"Memory commit {commit_hash[:8]} on {branch}: {message}")
        return commit_hash

    async def commit_allow_empty(
        self, message: str, author: Optional[CommitAuthor] = None
    ) -> str:
        return await self.commit(message, author)

    async def push(self, remote: str, branch_name: str) -> None:
        branches = self._state.remotes.setdefault(remote, [])
        if branch_name not in branches:
            branches.append(branch_name)

    async def push_with_upstream(self, remote: str, branch_name: str) -> None:
        await self.push(remote, branch_name)

    async def set_upstream(
        self, branch_name: str, remote: str, remote_branch: str
    ) -> None:
        self._require_branch(branch_name)

    # ------------------------------------------------------------------
    # Rebase / branch operations
    # ------------------------------------------------------------------

    async def rebase_continue(self) -> str:
        if not self._state.rebase_in_progress:
            raise RebaseNotInProgressError()
        self._state.rebase_in_progress = False
        self._state.conflicted_files = []
        return self._resolve_hash("HEAD")

    async def rebase_abort(self) -> None:
        if not self._state.rebase_in_progress:
            raise RebaseNotInProgressError()
        self._state.rebase_in_progress = False
        self._state.conflicted_files = []

    async def create_branch(
        self, branch_name: str, start_point: Optional[str] = None
    ) -> None:
        if branch_name in self._state.branches:
            raise BranchAlreadyExistsError(branch_name)

        if start_point:
            start = self._resolve(start_point)
            head = start.hash if start else None
        else:
            head = self._head_of(self._state.current_branch)
        self._state.branches[branch_name] = head
        self._state.current_branch = branch_name

    async def rebase(self, target_branch: str) -> None:
        if self._state.conflicted_files:
            self._state.rebase_in_progress = True
