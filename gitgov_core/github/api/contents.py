"""
GitHub repository contents operations.

Provides methods to read, write and delete single files and to list
directories through the contents API.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from gitgov_core.github.api.client import GitHubAPIClient, quote_path
from gitgov_core.github.models.types import ContentFile, ContentWriteResult, encode_base64

logger = logging.getLogger(__name__)


class ContentsOperations:
    """Handles GitHub repository contents operations."""

    def __init__(self, client: GitHubAPIClient):
        """Initialize contents operations.

        Args:
            client: Repository-scoped GitHub API client
        """
        self.client = client

    async def get_contents(
        self, path: str, ref: Optional[str] = None
    ) -> Union[ContentFile, List[ContentFile]]:
        """Get a file or the entries of a directory.

        Args:
            path: Path to directory or file (empty string for root)
            ref: Git reference (branch, tag, commit SHA)

        Returns:
            ContentFile for a file, list of ContentFile for a directory

        Raises:
            GitHubApiError: NOT_FOUND when the path does not exist
        """
        params = {"ref": ref} if ref else None
        url_path = self.client.repo_path(f"contents/{quote_path(path)}")
        response = await self.client.get(url_path, params=params)

        if isinstance(response, list):
            return [ContentFile.model_validate(item) for item in response]
        return ContentFile.model_validate(response)

    async def put_file(
        self,
        path: str,
        content: str,
        message: str,
        branch: Optional[str] = None,
        sha: Optional[str] = None,
    ) -> ContentWriteResult:
        """Create or update a file.

        Args:
            path: File path
            content: Text content (encoded to base64 here)
            message: Commit message
            branch: Target branch
            sha: Blob sha the caller last observed; required to update an
                existing file, omitted for first-time creation

        Returns:
            ContentWriteResult with the new blob and commit shas
        """
        data: Dict[str, Any] = {"message": message, "content": encode_base64(content)}
        if branch:
            data["branch"] = branch
        if sha:
            data["sha"] = sha

        url_path = self.client.repo_path(f"contents/{quote_path(path)}")
        response = await self.client.put(url_path, data=data)
        result = ContentWriteResult.from_api(response)
        logger.info(f"Wrote {path} (commit {(result.commit_sha or '')[:8]})")
        return result

    async def delete_file(
        self,
        path: str,
        sha: str,
        message: str,
        branch: Optional[str] = None,
    ) -> ContentWriteResult:
        data: Dict[str, Any] = {"message": message, "sha": sha}
        if branch:
            data["branch"] = branch

        url_path = self.client.repo_path(f"contents/{quote_path(path)}")
        response = await self.client.delete(url_path, data=data)
        result = ContentWriteResult.from_api(response)
        logger.info(f"Deleted {path} (commit {(result.commit_sha or '')[:8]})")
        return result
