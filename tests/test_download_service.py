"""
Tests for repository resolution and download aggregation.
"""

import asyncio

import pytest

from release_counter.dto import GitHubRelease
from release_counter.errors import ClientInputError
from release_counter.services import DownloadService, aggregate, resolve_repository, split_repository, sum_downloads

from conftest import make_release, make_settings


def release(release_id: int, downloads: list[int]) -> GitHubRelease:
    return GitHubRelease.model_validate(make_release(release_id, f"v{release_id}", downloads))


def test_sum_downloads_over_assets():
    """Test totals over releases with zero, one and several assets."""
    releases = [release(1, []), release(2, [7]), release(3, [1, 2, 3])]

    assert sum_downloads(releases) == 13
    assert sum_downloads([]) == 0
    assert [r.download_count for r in releases] == [0, 7, 6]


def test_aggregate():
    """Test the aggregated record."""
    latest = release(3, [10, 20])
    stats = aggregate("octo/hello", latest, [latest, release(2, [5]), release(1, [])])

    assert stats.repository == "octo/hello"
    assert stats.total_downloads == 35
    assert stats.releases_counted == 3
    assert stats.latest_release.tag == "v3"
    assert stats.latest_release.download_count == 30
    assert stats.latest_release.assets[1].download_count == 20
    assert stats.fetched_at.endswith("Z")


def test_aggregate_caps_releases_at_one_hundred():
    """Test that no more than 100 releases are counted."""
    releases = [release(i, [1]) for i in range(150)]
    stats = aggregate("octo/hello", releases[0], releases)

    assert stats.releases_counted == 100
    assert stats.total_downloads == 100


def test_resolve_repository():
    """Test explicit owner/repo, fallback and the missing case."""
    assert resolve_repository("octo", "hello", "fallback/repo") == "octo/hello"
    assert resolve_repository("octo", None, "fallback/repo") == "fallback/repo"
    assert resolve_repository("", "hello", "fallback/repo") == "fallback/repo"

    with pytest.raises(ClientInputError) as exc_info:
        resolve_repository(None, None, None)
    assert exc_info.value.status_code == 400
    assert "DEFAULT_REPOSITORY" in exc_info.value.message


@pytest.mark.parametrize("repository", ["octo/hello", "/octo/hello/", "octo//hello"])
def test_split_repository(repository):
    """Test splitting with empty segments ignored."""
    assert split_repository(repository) == ("octo", "hello")


@pytest.mark.parametrize("repository", ["octo", "octo/hello/extra", "/", ""])
def test_split_repository_malformed(repository):
    """Test that anything but two parts is a client error."""
    with pytest.raises(ClientInputError):
        split_repository(repository)


def test_service_get_stats():
    """Test the service against a fake release source."""

    class FakeSource:
        def __init__(self):
            self.calls = []

        async def fetch_release_data(self, owner, repo):
            self.calls.append((owner, repo))
            latest = release(2, [4])
            return latest, [latest, release(1, [6])]

        async def close(self):
            pass

    source = FakeSource()
    service = DownloadService(settings=make_settings(default_repository="/octo/hello/"), release_source=source)

    repository = service.resolve(None, None)
    stats = asyncio.run(service.get_stats(repository))

    assert repository == "octo/hello"
    assert source.calls == [("octo", "hello")]
    assert stats.total_downloads == 10
    assert stats.latest_release.download_count == 4
