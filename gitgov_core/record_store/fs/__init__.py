"""Filesystem record store."""

from gitgov_core.record_store.fs.fs_record_store import FsRecordStore

__all__ = ["FsRecordStore"]
