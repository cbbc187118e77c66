"""
Shared models for GitHub REST payloads and GitHub-backed component options.
"""

import base64
import binascii
import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from common.config.config import (
    GITGOV_DEFAULT_BRANCH,
    GITGOV_DIR,
    GITGOV_STATE_BRANCH,
    GITHUB_API_BASE_URL,
    RECORD_FILE_EXTENSION,
)
from common.constants import TREE_ENTRY_MODE_FILE, TREE_ENTRY_TYPE_BLOB
from gitgov_core.github.errors import GitHubApiError, GitHubApiErrorCode

logger = logging.getLogger(__name__)


# ============================================================================
# Git data API
# ============================================================================


class GitRef(BaseModel):
    ref: str
    sha: str

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "GitRef":
        return cls(ref=data.get("ref", ""), sha=data["object"]["sha"])


class GitCommitObject(BaseModel):
    sha: str
    tree_sha: str
    message: str = ""
    parents: List[str] = Field(default_factory=list)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "GitCommitObject":
        return cls(
            sha=data["sha"],
            tree_sha=data["tree"]["sha"],
            message=data.get("message", ""),
            parents=[p["sha"] for p in data.get("parents", [])],
        )


class TreeEntry(BaseModel):
    """One path in a tree write; ``sha=None`` deletes the path."""

    path: str
    mode: str = TREE_ENTRY_MODE_FILE
    type: str = TREE_ENTRY_TYPE_BLOB
    sha: Optional[str] = None


# ============================================================================
# Repository API
# ============================================================================


class CommitSummary(BaseModel):
    """A commit as returned by the commits listing and compare endpoints."""

    sha: str
    message: str
    author_name: str = ""
    author_email: str = ""
    date: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "CommitSummary":
        commit = data.get("commit", {})
        author = commit.get("author") or {}
        return cls(
            sha=data["sha"],
            message=commit.get("message", ""),
            author_name=author.get("name", ""),
            author_email=author.get("email", ""),
            date=author.get("date", ""),
        )

    @property
    def author(self) -> str:
        return f"{self.author_name} <{self.author_email}>"


class CompareFile(BaseModel):
    filename: str
    status: str
    previous_filename: Optional[str] = None


class CompareResult(BaseModel):
    commits: List[CommitSummary] = Field(default_factory=list)
    files: List[CompareFile] = Field(default_factory=list)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "CompareResult":
        return cls(
            commits=[CommitSummary.from_api(c) for c in data.get("commits", [])],
            files=[CompareFile.model_validate(f) for f in data.get("files", [])],
        )


# ============================================================================
# Contents API
# ============================================================================


class ContentFile(BaseModel):
    """A file or directory entry from the contents API."""

    name: str = ""
    path: str = ""
    type: str = ""  # "file" or "dir"
    sha: str = ""
    size: int = 0
    content: Optional[str] = None
    encoding: Optional[str] = "base64"

    @property
    def is_file(self) -> bool:
        return self.type == "file"

    @property
    def is_directory(self) -> bool:
        return self.type == "dir"

    def get_content(self) -> Optional[str]:
        """Decode the inline content, or None when GitHub withheld it."""
        if self.content is None:
            return None
        if self.encoding == "base64":
            return decode_base64(self.content)
        return self.content


class ContentWriteResult(BaseModel):
    content_sha: Optional[str] = None
    commit_sha: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "ContentWriteResult":
        content = data.get("content") or {}
        commit = data.get("commit") or {}
        return cls(content_sha=content.get("sha"), commit_sha=commit.get("sha"))


# ============================================================================
# Component options
# ============================================================================


class GitHubGitModuleOptions(BaseModel):
    owner: str
    repo: str
    token: Optional[str] = None
    default_branch: str = GITGOV_DEFAULT_BRANCH
    api_base_url: str = GITHUB_API_BASE_URL


class GitHubStoreOptions(BaseModel):
    owner: str
    repo: str
    ref: str = GITGOV_STATE_BRANCH
    base_path: str = ""


class GitHubRecordStoreOptions(GitHubStoreOptions):
    extension: str = RECORD_FILE_EXTENSION
    # Any object with encode(id) / decode(name); see record_store.IdEncoder
    id_encoder: Optional[Any] = None


class GitHubConfigStoreOptions(GitHubStoreOptions):
    ref: str = GITGOV_DEFAULT_BRANCH
    base_path: str = GITGOV_DIR


# ============================================================================
# Helpers
# ============================================================================


def encode_base64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def decode_base64(payload: str) -> str:
    """Decode GitHub's base64 payloads (which contain line breaks)."""
    try:
        return base64.b64decode(payload.replace("\n", "")).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        logger.error(f"Failed to decode base64 content: {e}")
        raise GitHubApiError(
            "Content is not valid base64 UTF-8", GitHubApiErrorCode.INVALID_RESPONSE
        ) from e
