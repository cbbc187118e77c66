"""GitHub contents API config store."""

from gitgov_core.config_store.github.github_config_store import (
    GitHubConfigStore,
    GitHubSaveResult,
)
from gitgov_core.github.models.types import GitHubConfigStoreOptions

__all__ = ["GitHubConfigStore", "GitHubConfigStoreOptions", "GitHubSaveResult"]
