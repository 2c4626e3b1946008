"""GitHub REST API client with exhaustive page traversal"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from gpd_backend.core.errors import GitHubAPIError, GitHubPayloadError, GitHubTransportError

logger = logging.getLogger(__name__)

GITHUB_API_BASE_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"
GITHUB_MEDIA_TYPE = "application/vnd.github+json"
PAGE_SIZE = 100


class GitHubRestClient:
    """
    Authenticated GET against the REST API for one credential.

    No retries and no timeout override: a failed call surfaces immediately as
    GitHubAPIError (or GitHubTransportError when no response arrives) and the
    transport's default timeout applies.
    """

    def __init__(
        self,
        token: str,
        *,
        base_url: str = GITHUB_API_BASE_URL,
        api_version: str = GITHUB_API_VERSION,
        page_size: int = PAGE_SIZE,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not token:
            raise ValueError("GitHub token is required")
        if page_size < 1:
            raise ValueError("page_size must be positive")

        self._token = token
        self._base_url = base_url
        self._api_version = api_version
        self._page_size = page_size
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def page_size(self) -> int:
        return self._page_size

    async def __aenter__(self) -> GitHubRestClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={
                "Accept": GITHUB_MEDIA_TYPE,
                "Authorization": f"Bearer {self._token}",
                "X-GitHub-Api-Version": self._api_version,
            },
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def get(self, path: str) -> Any:
        """Returns the decoded JSON body; raises GitHubAPIError on non-2xx"""
        if not self._client:
            raise RuntimeError("Client not initialized; use async context manager")

        try:
            response = await self._client.get(path)
        except httpx.RequestError as e:
            logger.debug(f"GitHub request for {path} failed: {type(e).__name__}: {e}")
            raise GitHubTransportError(path, str(e) or type(e).__name__) from e

        if not response.is_success:
            message = self._extract_error_message(response)
            logger.debug(f"GitHub API {response.status_code} for {path}: {message}")
            raise GitHubAPIError(response.status_code, path, message)

        try:
            return response.json()
        except ValueError as e:
            raise GitHubPayloadError(path, f"body is not valid JSON ({e})") from e

    async def paginate(self, path: str) -> list[dict[str, Any]]:
        """Fetches page 1, 2, 3... until a page comes back short of page_size.

        Pages are requested strictly in sequence; a page's existence is only known
        once the previous page has been read.
        """
        items: list[dict[str, Any]] = []
        separator = "&" if "?" in path else "?"
        page = 1

        while True:
            page_path = f"{path}{separator}per_page={self._page_size}&page={page}"
            batch = await self.get(page_path)

            if not isinstance(batch, list):
                raise GitHubPayloadError(page_path, "expected a JSON array")

            items.extend(batch)
            if len(batch) < self._page_size:
                break
            page += 1

        logger.debug(f"Paginated {path}: {len(items)} items over {page} page(s)")
        return items

    @staticmethod
    def _extract_error_message(response: httpx.Response) -> str | None:
        try:
            body = response.json()
        except ValueError:
            return None
        if isinstance(body, dict) and isinstance(body.get("message"), str):
            return body["message"]
        return None
