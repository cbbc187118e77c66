"""
Record Store Package

Generic record persistence with filesystem, memory and GitHub backends.
"""

from gitgov_core.record_store.fs import FsRecordStore
from gitgov_core.record_store.github import (
    GitHubRecordStore,
    GitHubRecordStoreOptions,
    GitHubWriteOpts,
    GitHubWriteResult,
)
from gitgov_core.record_store.memory import MemoryRecordStore
from gitgov_core.record_store.record_store import (
    DEFAULT_ID_ENCODER,
    DEFAULT_SERIALIZER,
    ColonIdEncoder,
    ConfigurationError,
    IdEncoder,
    InvalidIdError,
    JsonSerializer,
    RecordEntry,
    RecordStore,
    Serializer,
    validate_id,
)

__all__ = [
    "RecordStore",
    "RecordEntry",
    "IdEncoder",
    "ColonIdEncoder",
    "DEFAULT_ID_ENCODER",
    "Serializer",
    "JsonSerializer",
    "DEFAULT_SERIALIZER",
    "InvalidIdError",
    "ConfigurationError",
    "validate_id",
    "FsRecordStore",
    "MemoryRecordStore",
    "GitHubRecordStore",
    "GitHubRecordStoreOptions",
    "GitHubWriteOpts",
    "GitHubWriteResult",
]
