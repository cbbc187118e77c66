"""
Remote-transport error taxonomy for the GitHub REST backends.

HTTP status codes and transport failures are translated here so that stores
and Git modules never expose raw httpx exceptions to callers.
"""

from enum import Enum
from typing import Optional

import httpx


class GitHubApiErrorCode(str, Enum):
    PERMISSION_DENIED = "PERMISSION_DENIED"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    SERVER_ERROR = "SERVER_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    INVALID_ID = "INVALID_ID"
    INVALID_RESPONSE = "INVALID_RESPONSE"


class GitHubApiError(Exception):
    """A GitHub API call failed or returned something unusable."""

    def __init__(
        self,
        message: str,
        code: GitHubApiErrorCode,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.code = code
        self.status_code = status_code

    @property
    def is_not_found(self) -> bool:
        return self.code == GitHubApiErrorCode.NOT_FOUND


def map_status_to_error(status: int, context: str) -> GitHubApiError:
    """Translate an HTTP error status into a GitHubApiError.

    Args:
        status: HTTP status code of the failed response
        context: Short description of the request, e.g. "GET contents/x.json"

    Returns:
        GitHubApiError with the matching code
    """
    if status in (401, 403):
        return GitHubApiError(f"Permission denied: {context}", GitHubApiErrorCode.PERMISSION_DENIED, status)
    if status == 404:
        return GitHubApiError(f"Not found: {context}", GitHubApiErrorCode.NOT_FOUND, status)
    if status == 409:
        return GitHubApiError(f"Conflict: {context}", GitHubApiErrorCode.CONFLICT, status)
    if status == 422:
        return GitHubApiError(f"Validation failed: {context}", GitHubApiErrorCode.CONFLICT, status)
    if status >= 500:
        return GitHubApiError(f"Server error ({status}): {context}", GitHubApiErrorCode.SERVER_ERROR, status)
    return GitHubApiError(f"GitHub API error ({status}): {context}", GitHubApiErrorCode.SERVER_ERROR, status)


def map_request_error(error: httpx.RequestError, context: str) -> GitHubApiError:
    """Translate a transport failure (no response received) into a GitHubApiError."""
    return GitHubApiError(f"Network error: {error} ({context})", GitHubApiErrorCode.NETWORK_ERROR)
