"""GitHub contents API record store."""

from gitgov_core.github.models.types import GitHubRecordStoreOptions
from gitgov_core.record_store.github.github_record_store import (
    GitHubRecordStore,
    GitHubWriteOpts,
    GitHubWriteResult,
)

__all__ = [
    "GitHubRecordStore",
    "GitHubRecordStoreOptions",
    "GitHubWriteOpts",
    "GitHubWriteResult",
]
