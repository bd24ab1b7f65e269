"""
Shared fixtures: a fake GitHub API served through httpx.MockTransport and
an app wired to the in-memory response cache.
"""

from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from release_counter.api import create_app
from release_counter.config import Settings
from release_counter.repositories import MemoryResponseCache


def make_asset(name: str, downloads: int) -> dict[str, Any]:
    return {
        "name": name,
        "download_count": downloads,
        "browser_download_url": f"https://github.com/octo/hello/releases/download/{name}",
        "size": 1024,
    }


def make_release(release_id: int, tag: str, downloads: list[int]) -> dict[str, Any]:
    return {
        "id": release_id,
        "tag_name": tag,
        "draft": False,
        "prerelease": False,
        "created_at": "2024-01-01T00:00:00Z",
        "published_at": "2024-01-02T00:00:00Z",
        "html_url": f"https://github.com/octo/hello/releases/tag/{tag}",
        "assets": [make_asset(f"{tag}-{i}.zip", count) for i, count in enumerate(downloads)],
        "author": {"login": "octo"},
    }


class FakeGitHub:
    """Minimal stand-in for the GitHub releases API."""

    def __init__(self) -> None:
        self.releases: list[dict[str, Any]] = [
            make_release(3, "v1.2.0", [1000, 234]),
            make_release(2, "v1.1.0", [500]),
            make_release(1, "v1.0.0", []),
        ]
        self.latest: dict[str, Any] | None = self.releases[0]
        self.error: tuple[int, Any] | None = None
        # old owner -> current owner, answered with a 301 like a transferred repository
        self.moved: dict[str, str] = {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if self.error is not None:
            status, body = self.error
            if isinstance(body, str):
                return httpx.Response(status, text=body)
            return httpx.Response(status, json=body)

        path = request.url.path
        for old, new in self.moved.items():
            prefix = f"/repos/{old}/"
            if path.startswith(prefix):
                location = str(request.url).replace(prefix, f"/repos/{new}/", 1)
                return httpx.Response(301, headers={"Location": location}, json={"message": "Moved Permanently"})

        if path == "/repos/octo/hello/releases/latest":
            if self.latest is None:
                return httpx.Response(404, json={"message": "Not Found"})
            return httpx.Response(200, json=self.latest)
        if path == "/repos/octo/hello/releases":
            return httpx.Response(200, json=self.releases)
        return httpx.Response(404, json={"message": "Not Found"})


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "default_repository": None,
        "github_token": None,
        "github_api_base": "https://api.github.test",
        "cache_ttl_seconds": 300,
        "cache_backend": "memory",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def github():
    """Fake GitHub API."""
    return FakeGitHub()


@pytest.fixture
def cache():
    """In-memory response cache."""
    return MemoryResponseCache()


@pytest.fixture
def settings():
    """Settings with no default repository and no token."""
    return make_settings()


@pytest.fixture
def client(settings, cache, github):
    """Create a test client backed by the fake GitHub API."""
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(github))
    app = create_app(settings=settings, response_cache=cache, http_client=http_client)
    with TestClient(app) as test_client:
        yield test_client
