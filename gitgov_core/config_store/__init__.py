"""
Config Store Package

Persistence for the project configuration with filesystem, memory and
GitHub backends.
"""

from gitgov_core.config_store.config_store import ConfigStore, GitGovConfig
from gitgov_core.config_store.fs import FsConfigStore
from gitgov_core.config_store.github import (
    GitHubConfigStore,
    GitHubConfigStoreOptions,
    GitHubSaveResult,
)
from gitgov_core.config_store.memory import MemoryConfigStore

__all__ = [
    "ConfigStore",
    "GitGovConfig",
    "FsConfigStore",
    "MemoryConfigStore",
    "GitHubConfigStore",
    "GitHubConfigStoreOptions",
    "GitHubSaveResult",
]
