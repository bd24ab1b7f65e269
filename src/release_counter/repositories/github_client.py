"""GitHub releases API client.

Fetches release metadata over HTTPS using a shared httpx.AsyncClient.
Two requests are made per lookup and run concurrently:

- GET /repos/{owner}/{repo}/releases/latest
- GET /repos/{owner}/{repo}/releases?per_page=100

Only the first page of releases is ever requested.
"""

import asyncio
from typing import Any

import httpx
from pydantic import TypeAdapter

from release_counter.config import Settings
from release_counter.dto import GitHubRelease
from release_counter.errors import UpstreamError
from release_counter.utils import get_logger

logger = get_logger(__name__)

USER_AGENT = "repo-download-counter-worker"
RELEASES_PAGE_SIZE = 100

_release_list = TypeAdapter(list[GitHubRelease])


def safe_detail(response: httpx.Response) -> Any:
    """Best-effort parse of an upstream error body.

    Tries JSON first, then raw text, then a fixed placeholder.
    """
    try:
        return response.json()
    except ValueError:
        pass

    try:
        return response.text
    except (UnicodeDecodeError, LookupError):
        return {"message": "Failed to parse error response"}


class GitHubReleaseClient:
    """GitHub implementation of the ReleaseSource protocol.

    This class satisfies the ReleaseSource protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        client = GitHubReleaseClient.create(settings)
        latest, releases = await client.fetch_release_data("octo", "hello")
        await client.close()
        ```
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the GitHub client.

        Args:
            base_url: GitHub API base URL.
            token: Bearer token; blank or None means anonymous requests.
            timeout: Request timeout in seconds.
            http_client: Pre-built client (e.g. with a mock transport).
        """
        self._base_url = base_url.rstrip("/")
        self._token = token.strip() if token else None
        self._timeout = timeout
        self._client = http_client

    @classmethod
    def create(
        cls,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
    ) -> "GitHubReleaseClient":
        """Factory method to create GitHubReleaseClient from settings.

        Args:
            settings: Application settings (API base, token, timeout)
            http_client: Optional pre-built httpx client

        Returns:
            Configured GitHubReleaseClient
        """
        return cls(
            base_url=settings.github_api_base,
            token=settings.token,
            timeout=settings.upstream_timeout,
            http_client=http_client,
        )

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client.

        Returns:
            The httpx.AsyncClient instance
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            )
        return self._client

    @property
    def headers(self) -> dict[str, str]:
        """Headers sent with every upstream request."""
        headers = {
            "User-Agent": USER_AGENT,
            "Accept": "application/vnd.github+json",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        response = await self.client.get(
            f"{self._base_url}{path}",
            params=params,
            headers=self.headers,
            # Renamed or transferred repositories answer with a 301
            follow_redirects=True,
        )

        if not response.is_success:
            detail = safe_detail(response)
            logger.warning("GitHub API request failed", path=path, status=response.status_code)
            raise UpstreamError(response.status_code, detail)

        return response.json()

    async def fetch_latest(self, owner: str, repo: str) -> GitHubRelease:
        """Fetch the latest published release.

        Raises:
            UpstreamError: On a non-success status (404 when there is no release)
        """
        data = await self._get(f"/repos/{owner}/{repo}/releases/latest")
        return GitHubRelease.model_validate(data)

    async def fetch_releases(self, owner: str, repo: str) -> list[GitHubRelease]:
        """Fetch the first page (at most 100) of the most recent releases.

        Raises:
            UpstreamError: On a non-success status
        """
        data = await self._get(
            f"/repos/{owner}/{repo}/releases",
            params={"per_page": RELEASES_PAGE_SIZE},
        )
        return _release_list.validate_python(data)[:RELEASES_PAGE_SIZE]

    async def fetch_release_data(
        self,
        owner: str,
        repo: str,
    ) -> tuple[GitHubRelease, list[GitHubRelease]]:
        """Fetch the latest release and recent releases concurrently.

        The first failure propagates immediately; the sibling request is left
        to finish and its result is discarded.

        Returns:
            Tuple of (latest release, up to 100 most recent releases)
        """
        latest, releases = await asyncio.gather(
            self.fetch_latest(owner, repo),
            self.fetch_releases(owner, repo),
        )
        return latest, releases

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None
