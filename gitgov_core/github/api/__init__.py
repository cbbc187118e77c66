"""
GitHub API Module

Handles the GitHub REST API surface used by the remote backends:
- Git data (refs, commits, trees, blobs)
- Repository queries (branches, commit listings, comparisons)
- File contents
"""

from gitgov_core.github.api.client import GitHubAPIClient
from gitgov_core.github.api.contents import ContentsOperations
from gitgov_core.github.api.git_data import GitDataOperations
from gitgov_core.github.api.repositories import RepositoryOperations

__all__ = [
    "GitHubAPIClient",
    "ContentsOperations",
    "GitDataOperations",
    "RepositoryOperations",
]
