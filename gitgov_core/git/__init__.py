"""
Git Package

One GitModule interface with three independent backends:
- LocalGitModule: the git executable on a working copy
- MemoryGitModule: in-memory test double
- GitHubGitModule: GitHub REST API (blob -> tree -> commit -> ref)
"""

from gitgov_core.git.errors import (
    BranchAlreadyExistsError,
    BranchNotFoundError,
    ConcurrentUpdateError,
    GitCommandError,
    GitError,
    GitFileNotFoundError,
    GitRemoteError,
    MergeConflictError,
    NothingToCommitError,
    OperationNotSupportedError,
    RebaseConflictError,
    RebaseNotInProgressError,
)
from gitgov_core.git.git_module import GitModule
from gitgov_core.git.github import GitHubGitModule, GitHubGitModuleOptions
from gitgov_core.git.local import LocalGitModule, exec_command
from gitgov_core.git.memory import MemoryGitModule
from gitgov_core.git.types import (
    ChangedFile,
    CommitAuthor,
    CommitInfo,
    ExecCommand,
    ExecOptions,
    ExecResult,
    GetCommitHistoryOptions,
    is_full_commit_hash,
)

__all__ = [
    "GitModule",
    "LocalGitModule",
    "MemoryGitModule",
    "GitHubGitModule",
    "GitHubGitModuleOptions",
    "exec_command",
    "ChangedFile",
    "CommitAuthor",
    "CommitInfo",
    "ExecCommand",
    "ExecOptions",
    "ExecResult",
    "GetCommitHistoryOptions",
    "is_full_commit_hash",
    "GitError",
    "GitCommandError",
    "GitRemoteError",
    "ConcurrentUpdateError",
    "NothingToCommitError",
    "BranchNotFoundError",
    "BranchAlreadyExistsError",
    "GitFileNotFoundError",
    "MergeConflictError",
    "RebaseConflictError",
    "RebaseNotInProgressError",
    "OperationNotSupportedError",
]
