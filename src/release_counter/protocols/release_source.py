"""Release source protocol.

Defines the interface for fetching release metadata of a repository.
"""

from typing import Protocol, runtime_checkable

from release_counter.dto import GitHubRelease


@runtime_checkable
class ReleaseSource(Protocol):
    """Protocol for release metadata providers."""

    async def fetch_release_data(
        self,
        owner: str,
        repo: str,
    ) -> tuple[GitHubRelease, list[GitHubRelease]]:
        """Fetch the latest release and the most recent releases concurrently.

        Args:
            owner: Repository owner
            repo: Repository name

        Returns:
            Tuple of (latest release, up to 100 most recent releases)

        Raises:
            UpstreamError: If either upstream call returns a non-success status
        """
        ...

    async def close(self) -> None:
        """Release network resources."""
        ...
