"""
Shared types for Git operations.

Value objects returned by every Git backend plus the signature of the
injected process executor used by the local backend.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional

from common.constants import FULL_COMMIT_HASH_LENGTH

_FULL_HASH_RE = re.compile(rf"^[0-9a-f]{{{FULL_COMMIT_HASH_LENGTH}}}$")


class ChangeStatus(str, Enum):
    ADDED = "A"
    MODIFIED = "M"
    DELETED = "D"


class ConfigScope(str, Enum):
    LOCAL = "local"
    GLOBAL = "global"
    SYSTEM = "system"


@dataclass
class ExecOptions:
    cwd: Optional[str] = None
    env: Optional[Dict[str, str]] = None
    timeout_ms: Optional[int] = None


@dataclass
class ExecResult:
    exit_code: int
    stdout: str = ""
    stderr: str = ""


@dataclass
class CommitAuthor:
    name: str
    email: str

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>"


@dataclass
class CommitInfo:
    hash: str
    message: str
    author: str
    date: str


@dataclass
class ChangedFile:
    status: str  # "A", "M" or "D"
    file: str


@dataclass
class GetCommitHistoryOptions:
    max_count: Optional[int] = None
    path_filter: Optional[str] = None


# (command, args, options) -> ExecResult
ExecCommand = Callable[[str, List[str], Optional[ExecOptions]], Awaitable[ExecResult]]


def is_full_commit_hash(ref: str) -> bool:
    """Return True when ``ref`` is a fully resolved 40-char lowercase hex hash."""
    return bool(ref) and _FULL_HASH_RE.match(ref) is not None
