"""
GitHub repository operations (branches, commit listings, comparisons).
"""

import logging
from typing import Any, Dict, List, Optional

from common.config.config import GITHUB_PAGE_SIZE
from gitgov_core.github.api.client import GitHubAPIClient, quote_path
from gitgov_core.github.models.types import CommitSummary, CompareResult

logger = logging.getLogger(__name__)


class RepositoryOperations:
    """Handles GitHub repository operations."""

    def __init__(self, client: GitHubAPIClient):
        """Initialize repository operations.

        Args:
            client: Repository-scoped GitHub API client
        """
        self.client = client

    async def get_branch(self, branch: str) -> Dict[str, Any]:
        return await self.client.get(self.client.repo_path(f"branches/{quote_path(branch)}"))

    async def list_branches(self, per_page: int = GITHUB_PAGE_SIZE) -> List[str]:
        """List every branch name, following pagination until a short page.

        Args:
            per_page: Page size

        Returns:
            Branch names in API order
        """
        names: List[str] = []
        page = 1
        while True:
            response = await self.client.get(
                self.client.repo_path("branches"),
                params={"per_page": per_page, "page": page},
            )
            batch = response or []
            names.extend(item["name"] for item in batch)
            if len(batch) < per_page:
                break
            page += 1
        return names

    async def list_commits(
        self,
        sha: str,
        max_count: Optional[int] = None,
        path: Optional[str] = None,
        per_page: int = GITHUB_PAGE_SIZE,
    ) -> List[CommitSummary]:
        """List commits reachable from ``sha``, newest first.

        Follows pagination until ``max_count`` commits are collected or a
        short page ends the listing.

        Args:
            sha: Branch name or commit sha to start from
            max_count: Upper bound on returned commits (all when None)
            path: Only commits touching this path
            per_page: Page size
        """
        if max_count:
            per_page = min(per_page, max_count)

        commits: List[CommitSummary] = []
        page = 1
        while True:
            params: Dict[str, Any] = {"sha": sha, "per_page": per_page, "page": page}
            if path:
                params["path"] = path

            response = await self.client.get(self.client.repo_path("commits"), params=params)
            batch = response or []
            commits.extend(CommitSummary.from_api(item) for item in batch)
            if len(batch) < per_page or (max_count and len(commits) >= max_count):
                break
            page += 1

        if max_count:
            commits = commits[:max_count]
        logger.debug(f"Listed {len(commits)} commits from {sha} over {page} page(s)")
        return commits

    async def get_commit(self, sha: str) -> CommitSummary:
        response = await self.client.get(self.client.repo_path(f"commits/{quote_path(sha)}"))
        return CommitSummary.from_api(response)

    async def compare(self, base: str, head: str) -> CompareResult:
        """Compare two refs (``base...head``)."""
        url_path = self.client.repo_path(f"compare/{quote_path(base)}...{quote_path(head)}")
        response = await self.client.get(url_path)
        return CompareResult.from_api(response)
