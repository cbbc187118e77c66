"""
GitHub Package

REST client, error taxonomy and payload models shared by the GitHub-backed
Git module, record store and config store.
"""

from gitgov_core.github.api import GitHubAPIClient
from gitgov_core.github.errors import (
    GitHubApiError,
    GitHubApiErrorCode,
    map_request_error,
    map_status_to_error,
)

__all__ = [
    "GitHubAPIClient",
    "GitHubApiError",
    "GitHubApiErrorCode",
    "map_request_error",
    "map_status_to_error",
]
