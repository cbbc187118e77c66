"""Filesystem config store."""

from gitgov_core.config_store.fs.fs_config_store import FsConfigStore

__all__ = ["FsConfigStore"]
