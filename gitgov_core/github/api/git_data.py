"""
GitHub Git data operations (refs, commits, trees, blobs).

Low-level object API used to assemble commits without a working copy.
"""

import logging
from typing import Any, Dict, List, Optional

from gitgov_core.github.api.client import GitHubAPIClient, quote_path
from gitgov_core.github.models.types import (
    GitCommitObject,
    GitRef,
    TreeEntry,
    decode_base64,
    encode_base64,
)

logger = logging.getLogger(__name__)


class GitDataOperations:
    """Handles GitHub Git database operations."""

    def __init__(self, client: GitHubAPIClient):
        """Initialize Git data operations.

        Args:
            client: Repository-scoped GitHub API client
        """
        self.client = client

    async def get_ref(self, branch: str) -> GitRef:
        """Resolve ``heads/<branch>``.

        Raises:
            GitHubApiError: NOT_FOUND when the branch does not exist
        """
        response = await self.client.get(self.client.repo_path(f"git/ref/heads/{quote_path(branch)}"))
        return GitRef.from_api(response)

    async def create_ref(self, branch: str, sha: str) -> GitRef:
        response = await self.client.post(
            self.client.repo_path("git/refs"),
            data={"ref": f"refs/heads/{branch}", "sha": sha},
        )
        logger.info(f"Created ref heads/{branch} at {sha[:8]}")
        return GitRef.from_api(response)

    async def update_ref(self, branch: str, sha: str, force: bool = False) -> GitRef:
        """Move ``heads/<branch>`` to ``sha``.

        Without ``force`` GitHub only accepts fast-forward updates and
        answers 422 otherwise.
        """
        response = await self.client.patch(
            self.client.repo_path(f"git/refs/heads/{quote_path(branch)}"),
            data={"sha": sha, "force": force},
        )
        return GitRef.from_api(response)

    async def get_commit(self, sha: str) -> GitCommitObject:
        response = await self.client.get(self.client.repo_path(f"git/commits/{sha}"))
        return GitCommitObject.from_api(response)

    async def create_commit(
        self,
        message: str,
        tree_sha: str,
        parents: List[str],
        author: Optional[Dict[str, str]] = None,
    ) -> GitCommitObject:
        data: Dict[str, Any] = {"message": message, "tree": tree_sha, "parents": parents}
        if author:
            data["author"] = author
        response = await self.client.post(self.client.repo_path("git/commits"), data=data)
        return GitCommitObject.from_api(response)

    async def create_tree(self, entries: List[TreeEntry], base_tree: Optional[str] = None) -> str:
        """Create a tree and return its sha.

        Entries with ``sha=None`` are sent with an explicit null sha, which
        GitHub interprets as a deletion relative to ``base_tree``.
        """
        data: Dict[str, Any] = {"tree": [entry.model_dump() for entry in entries]}
        if base_tree:
            data["base_tree"] = base_tree
        response = await self.client.post(self.client.repo_path("git/trees"), data=data)
        return response["sha"]

    async def create_blob(self, content: str) -> str:
        response = await self.client.post(
            self.client.repo_path("git/blobs"),
            data={"content": encode_base64(content), "encoding": "base64"},
        )
        return response["sha"]

    async def get_blob(self, sha: str) -> str:
        response = await self.client.get(self.client.repo_path(f"git/blobs/{sha}"))
        if response.get("encoding") == "base64":
            return decode_base64(response.get("content", ""))
        return response.get("content", "")
