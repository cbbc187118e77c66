"""
GitHub API client for making authenticated requests against one repository.
"""

import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from common.config.config import (
    GH_DEFAULT_OWNER,
    GITHUB_API_BASE_URL,
    GITHUB_API_VERSION,
    GITHUB_CONNECT_TIMEOUT,
    GITHUB_REQUEST_TIMEOUT,
    GITHUB_TOKEN,
)
from common.constants import GITHUB_ACCEPT_HEADER
from gitgov_core.github.errors import (
    GitHubApiError,
    GitHubApiErrorCode,
    map_request_error,
    map_status_to_error,
)

logger = logging.getLogger(__name__)

SUPPORTED_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH")


def quote_path(path: str) -> str:
    """Percent-encode a file path or ref name for use inside a URL path.

    "/" separators are kept; "#", "?", spaces and other reserved characters
    are escaped so they cannot end the path early.
    """
    return quote(path, safe="/")


class GitHubAPIClient:
    """Repository-scoped client for GitHub REST API interactions."""

    def __init__(
        self,
        owner: Optional[str] = None,
        repo: str = "",
        token: Optional[str] = None,
        base_url: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize GitHub API client.

        Args:
            owner: Repository owner (defaults to config)
            repo: Repository name
            token: Personal access or installation token (defaults to config)
            base_url: API base URL, e.g. for GitHub Enterprise (defaults to config)
            http_client: Shared httpx client; when omitted a short-lived client
                is opened per request
        """
        self.owner = owner or GH_DEFAULT_OWNER
        self.repo = repo
        self.token = token if token is not None else GITHUB_TOKEN
        self.base_url = (base_url or GITHUB_API_BASE_URL).rstrip("/")
        self._http_client = http_client

        if not self.token:
            logger.warning("GitHub API client initialized without a token - requests may be rejected")

    def repo_path(self, path: str) -> str:
        """Build an API path relative to this client's repository."""
        return f"repos/{self.owner}/{self.repo}/{path}"

    def _get_headers(self) -> Dict[str, str]:
        headers = {
            "Accept": GITHUB_ACCEPT_HEADER,
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
            "Content-Type": "application/json",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def request(
        self,
        method: str,
        path: str,
        data: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        timeout: float = GITHUB_REQUEST_TIMEOUT,
    ) -> Any:
        """Make a GitHub API request.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE, PATCH)
            path: API path (without base URL)
            data: JSON request body
            params: Query parameters
            timeout: Request timeout in seconds

        Returns:
            Decoded JSON body (dict or list), or an empty dict for empty bodies

        Raises:
            GitHubApiError: For HTTP errors, transport failures and
                undecodable bodies
        """
        method_upper = method.upper()
        if method_upper not in SUPPORTED_METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")

        url = f"{self.base_url}/{path}"
        context = f"{method_upper} {path}"

        try:
            timeout_config = httpx.Timeout(timeout, connect=GITHUB_CONNECT_TIMEOUT)
            response = await self._execute_http_request(
                method_upper, url, self._get_headers(), data, params, timeout_config
            )
        except httpx.RequestError as e:
            logger.error(f"GitHub API request error: {context}: {e}")
            raise map_request_error(e, context) from e

        return self._process_response(response, context)

    async def _execute_http_request(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        data: Optional[Dict[str, Any]],
        params: Optional[Dict[str, Any]],
        timeout_config: httpx.Timeout,
    ) -> httpx.Response:
        if self._http_client is not None:
            return await self._http_client.request(
                method, url, json=data, headers=headers, params=params, timeout=timeout_config
            )

        async with httpx.AsyncClient(timeout=timeout_config, trust_env=False) as client:
            return await client.request(method, url, json=data, headers=headers, params=params)

    def _process_response(self, response: httpx.Response, context: str) -> Any:
        """Decode a successful response or raise the mapped error."""
        if 200 <= response.status_code < 300:
            logger.debug(f"GitHub API {context} successful (status: {response.status_code})")
            if not response.content:
                return {}
            try:
                return response.json()
            except json.JSONDecodeError as e:
                raise GitHubApiError(
                    f"Invalid JSON in response: {context}",
                    GitHubApiErrorCode.INVALID_RESPONSE,
                    response.status_code,
                ) from e

        error = map_status_to_error(response.status_code, context)
        if response.status_code == 404:
            logger.debug(str(error))
        else:
            logger.error(f"GitHub API request failed (status {response.status_code}): {context}: {response.text}")
        raise error

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, data: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("POST", path, data=data)

    async def put(self, path: str, data: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("PUT", path, data=data)

    async def delete(self, path: str, data: Optional[Dict[str, Any]] = None) -> Any:
        """Make a DELETE request (the contents API expects a JSON body)."""
        return await self.request("DELETE", path, data=data)

    async def patch(self, path: str, data: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("PATCH", path, data=data)
