"""Download statistics service.

Resolves which repository a request is about, fetches its releases through
a ReleaseSource and reduces them into a DownloadStatsResponse.
"""

from collections.abc import Iterable
from datetime import datetime, timezone

from release_counter.config import Settings
from release_counter.dto import AssetItem, DownloadStatsResponse, GitHubRelease, LatestReleaseSummary
from release_counter.errors import ClientInputError
from release_counter.protocols import ReleaseSource

MISSING_REPOSITORY_MESSAGE = (
    "Missing repository. Provide owner and repo query params or set DEFAULT_REPOSITORY."
)
MALFORMED_REPOSITORY_MESSAGE = "Repository must be in the form owner/repo."
MAX_RELEASES_COUNTED = 100


def resolve_repository(owner: str | None, repo: str | None, default: str | None) -> str:
    """Pick the repository identifier for a request.

    Both `owner` and `repo` must be given to override the default.

    Raises:
        ClientInputError: If neither source yields a repository
    """
    if owner and repo:
        return f"{owner}/{repo}"
    if default:
        return default
    raise ClientInputError(MISSING_REPOSITORY_MESSAGE)


def split_repository(repository: str) -> tuple[str, str]:
    """Split `owner/repo` into its two parts, ignoring empty segments.

    Raises:
        ClientInputError: If the string does not have exactly two parts
    """
    parts = [part for part in repository.split("/") if part]
    if len(parts) != 2:
        raise ClientInputError(MALFORMED_REPOSITORY_MESSAGE)
    return parts[0], parts[1]


def sum_downloads(releases: Iterable[GitHubRelease]) -> int:
    """Total downloads over every asset of every release."""
    return sum(release.download_count for release in releases)


def utc_timestamp() -> str:
    """Current time as ISO-8601 with millisecond precision, e.g. 2024-01-02T03:04:05.678Z."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def aggregate(
    repository: str,
    latest: GitHubRelease,
    releases: list[GitHubRelease],
) -> DownloadStatsResponse:
    """Build the aggregated response from fetched release data.

    Args:
        repository: Repository identifier, owner/repo
        latest: The latest release
        releases: The most recent releases; only the first 100 are counted

    Returns:
        DownloadStatsResponse stamped with the current time
    """
    counted = releases[:MAX_RELEASES_COUNTED]

    return DownloadStatsResponse(
        repository=repository,
        latest_release=LatestReleaseSummary(
            tag=latest.tag_name,
            html_url=latest.html_url,
            download_count=latest.download_count,
            assets=[
                AssetItem(
                    name=asset.name,
                    download_count=asset.download_count,
                    browser_download_url=asset.browser_download_url,
                )
                for asset in latest.assets
            ],
        ),
        total_downloads=sum_downloads(counted),
        releases_counted=len(counted),
        fetched_at=utc_timestamp(),
    )


class DownloadService:
    """Orchestrates repository resolution, fetching and aggregation.

    Example:
        ```python
        service = DownloadService(settings=settings, release_source=client)
        repository = service.resolve("octo", "hello")
        stats = await service.get_stats(repository)
        ```
    """

    def __init__(self, settings: Settings, release_source: ReleaseSource) -> None:
        """Initialize the download service.

        Args:
            settings: Read-only application settings
            release_source: Where release metadata comes from (required)
        """
        self._settings = settings
        self._source = release_source

    def resolve(self, owner: str | None, repo: str | None) -> str:
        """Resolve and validate the repository for a request.

        Returns:
            Normalized `owner/repo`

        Raises:
            ClientInputError: If no repository is available or it is malformed
        """
        repository = resolve_repository(owner, repo, self._settings.default_repository)
        resolved_owner, resolved_repo = split_repository(repository)
        return f"{resolved_owner}/{resolved_repo}"

    async def get_stats(self, repository: str) -> DownloadStatsResponse:
        """Fetch and aggregate download statistics.

        Args:
            repository: Normalized `owner/repo` (see resolve())

        Returns:
            The aggregated statistics

        Raises:
            UpstreamError: If GitHub returns a non-success status
        """
        owner, repo = split_repository(repository)
        latest, releases = await self._source.fetch_release_data(owner, repo)
        return aggregate(f"{owner}/{repo}", latest, releases)

    @property
    def release_source(self) -> ReleaseSource:
        """Get the underlying release source (for testing)."""
        return self._source
