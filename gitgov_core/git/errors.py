"""
Error taxonomy shared by every Git backend.

Callers catch these types instead of inspecting exit codes, stderr text or
HTTP status codes.
"""

from typing import List, Optional


class GitError(Exception):
    """Base class for all Git operation failures."""


class GitCommandError(GitError):
    """A Git command (or its remote equivalent) failed."""

    def __init__(
        self,
        message: str,
        stderr: str = "",
        command: str = "",
        stdout: str = "",
    ):
        super().__init__(message)
        self.stderr = stderr
        self.command = command
        self.stdout = stdout


class BranchNotFoundError(GitError):
    def __init__(self, branch_name: str):
        super().__init__(f"Branch not found: {branch_name}")
        self.branch_name = branch_name


class BranchAlreadyExistsError(GitError):
    def __init__(self, branch_name: str):
        super().__init__(f"Branch already exists: {branch_name}")
        self.branch_name = branch_name


class GitFileNotFoundError(GitError):
    def __init__(self, file_path: str, commit_hash: str):
        super().__init__(f"File not found: {file_path} in commit {commit_hash}")
        self.file_path = file_path
        self.commit_hash = commit_hash


class MergeConflictError(GitError):
    def __init__(self, conflicted_files: Optional[List[str]] = None):
        self.conflicted_files = list(conflicted_files or [])
        super().__init__(
            f"Merge conflict in {len(self.conflicted_files)} file(s): "
            f"{', '.join(self.conflicted_files)}"
        )


class RebaseConflictError(GitError):
    def __init__(self, conflicted_files: Optional[List[str]] = None):
        self.conflicted_files = list(conflicted_files or [])
        super().__init__(
            f"Rebase conflict in {len(self.conflicted_files)} file(s): "
            f"{', '.join(self.conflicted_files)}"
        )


class RebaseNotInProgressError(GitError):
    def __init__(self):
        super().__init__("No rebase in progress")


class OperationNotSupportedError(GitError):
    """Raised by backends that cannot express an operation."""

    def __init__(self, operation: str, backend: str = "this backend"):
        super().__init__(f"Operation '{operation}' is not supported by {backend}")
        self.operation = operation
        self.backend = backend


class NothingToCommitError(GitError):
    def __init__(self):
        super().__init__("Cannot commit: staging buffer is empty")


class GitRemoteError(GitCommandError):
    """A remote-API backend call failed.

    ``code`` is the transport error kind (permission denied, conflict, server,
    network or invalid response) and ``status_code`` the HTTP status, if any.
    """

    def __init__(
        self,
        message: str,
        code: str,
        status_code: Optional[int] = None,
        command: str = "",
        stderr: str = "",
    ):
        super().__init__(message, stderr=stderr, command=command)
        self.code = code
        self.status_code = status_code


class ConcurrentUpdateError(GitRemoteError):
    """The branch moved between reading its head and updating it."""

    def __init__(self, branch_name: str, code: str, status_code: Optional[int] = None):
        super().__init__(
            f"Failed to update {branch_name}: non-fast-forward update rejected "
            f"(branch moved since the commit started)",
            code=code,
            status_code=status_code,
            command=f"updateRef {branch_name}",
        )
        self.branch_name = branch_name
