"""
Tests for the release counter HTTP surface.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from release_counter.api import create_app
from release_counter.entities import CachedResponse

from conftest import make_settings

REPO_QUERY = "/?owner=octo&repo=hello"


def test_json_stats(client):
    """Test the JSON aggregate for an explicit repository."""
    response = client.get(REPO_QUERY)
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json; charset=UTF-8"
    assert response.headers["cache-control"] == "public, s-maxage=300"
    assert response.headers["access-control-allow-origin"] == "*"

    data = response.json()
    assert data["repository"] == "octo/hello"
    assert data["total_downloads"] == 1734
    assert data["releases_counted"] == 3
    assert data["latest_release"]["tag"] == "v1.2.0"
    assert data["latest_release"]["download_count"] == 1234
    assert [a["download_count"] for a in data["latest_release"]["assets"]] == [1000, 234]
    assert data["fetched_at"].endswith("Z")


def test_json_is_pretty_printed(client):
    """Test that the JSON body is indented."""
    response = client.get(REPO_QUERY)
    assert response.text.startswith('{\n  "repository": "octo/hello"')


def test_upstream_requests(client, github):
    """Test the two upstream calls and their headers."""
    client.get(REPO_QUERY)

    paths = sorted(str(r.url) for r in github.requests)
    assert paths == [
        "https://api.github.test/repos/octo/hello/releases/latest",
        "https://api.github.test/repos/octo/hello/releases?per_page=100",
    ]
    for request in github.requests:
        assert request.headers["user-agent"] == "repo-download-counter-worker"
        assert "authorization" not in request.headers


def test_token_sent_as_bearer(cache, github):
    """Test that a configured token is trimmed and sent."""
    settings = make_settings(github_token="  secret-token \n")
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(github))
    with TestClient(create_app(settings, response_cache=cache, http_client=http_client)) as client:
        client.get(REPO_QUERY)

    assert {r.headers["authorization"] for r in github.requests} == {"Bearer secret-token"}


def test_blank_token_is_anonymous(cache, github):
    """Test that a whitespace-only token sends no authorization header."""
    settings = make_settings(github_token="   ")
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(github))
    with TestClient(create_app(settings, response_cache=cache, http_client=http_client)) as client:
        assert client.get(REPO_QUERY).status_code == 200

    assert all("authorization" not in r.headers for r in github.requests)


def test_default_repository(cache, github):
    """Test falling back to DEFAULT_REPOSITORY when owner/repo are absent."""
    settings = make_settings(default_repository="octo/hello")
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(github))
    with TestClient(create_app(settings, response_cache=cache, http_client=http_client)) as client:
        response = client.get("/?owner=octo")

    assert response.status_code == 200
    assert response.json()["repository"] == "octo/hello"


def test_missing_repository(client, github):
    """Test the 400 when no repository can be resolved."""
    response = client.get("/")
    assert response.status_code == 400
    assert response.json() == {
        "error": "Missing repository. Provide owner and repo query params or set DEFAULT_REPOSITORY."
    }
    assert response.headers["cache-control"] == "public, s-maxage=0"
    assert response.headers["access-control-allow-origin"] == "*"
    assert github.requests == []


def test_malformed_repository(cache, github):
    """Test that a default repository without a slash is a client error."""
    settings = make_settings(default_repository="not-a-repo")
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(github))
    with TestClient(create_app(settings, response_cache=cache, http_client=http_client)) as client:
        response = client.get("/")

    assert response.status_code == 400
    assert response.json() == {"error": "Repository must be in the form owner/repo."}
    assert github.requests == []


def test_upstream_not_found(client, github):
    """Test that an upstream 404 is propagated with its detail."""
    github.latest = None
    response = client.get(REPO_QUERY)

    assert response.status_code == 404
    data = response.json()
    assert data["error"] == "GitHub API responded with status 404"
    assert data["status"] == 404
    assert data["detail"] == {"message": "Not Found"}
    assert response.headers["cache-control"] == "public, s-maxage=0"
    assert response.headers["access-control-allow-origin"] == "*"


def test_upstream_text_error(client, github):
    """Test that a non-JSON upstream error body is passed through as text."""
    github.error = (503, "upstream unavailable")
    response = client.get(REPO_QUERY)

    assert response.status_code == 503
    assert response.json()["detail"] == "upstream unavailable"


def test_upstream_errors_are_not_cached(client, github, cache):
    """Test that failures are never written to the cache."""
    github.error = (500, {"message": "boom"})
    client.get(REPO_QUERY)
    client.get(REPO_QUERY)

    assert len(cache) == 0
    latest_calls = [r for r in github.requests if r.url.path.endswith("/releases/latest")]
    assert len(latest_calls) == 2


def test_network_failure(cache, settings):
    """Test that a transport failure maps to a generic 500."""

    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(refuse))
    with TestClient(create_app(settings, response_cache=cache, http_client=http_client)) as client:
        response = client.get(REPO_QUERY)

    assert response.status_code == 500
    assert response.json() == {"error": "Internal Server Error"}
    assert response.headers["cache-control"] == "public, s-maxage=0"


def test_repeated_request_is_cached(client, github):
    """Test that an identical request within the TTL skips GitHub."""
    first = client.get(REPO_QUERY)
    second = client.get(REPO_QUERY)

    assert first.status_code == second.status_code == 200
    assert second.text == first.text
    # one call per endpoint, issued once
    assert len(github.requests) == 2


def test_cached_json_gets_cors(client, cache):
    """Test that CORS headers are re-applied on a JSON cache hit."""
    client.get(REPO_QUERY)

    # Simulate an entry stored without CORS headers
    for key, (expires_at, entry) in list(cache._entries.items()):
        stripped = {k: v for k, v in entry.headers.items() if not k.startswith("Access-Control")}
        cache._entries[key] = (expires_at, CachedResponse(entry.status_code, entry.body, stripped))

    response = client.get(REPO_QUERY)
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["access-control-allow-methods"] == "GET, OPTIONS"


def test_different_query_is_not_cached(client, github):
    """Test that the cache key covers the full URL."""
    client.get(REPO_QUERY)
    client.get(REPO_QUERY + "&format=svg")

    assert len(github.requests) == 4


def test_cache_write_failure_is_ignored(settings, github):
    """Test that a failing cache backend does not affect the response."""

    class BrokenCache:
        def match(self, key):
            raise ConnectionError("cache down")

        def put(self, key, response, ttl):
            raise ConnectionError("cache down")

        def health_check(self):
            return False

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(github))
    with TestClient(create_app(settings, response_cache=BrokenCache(), http_client=http_client)) as client:
        response = client.get(REPO_QUERY)

    assert response.status_code == 200
    assert response.json()["total_downloads"] == 1734


def test_options_preflight(client, github):
    """Test OPTIONS on any path."""
    response = client.options("/badge/latest?owner=octo&repo=hello")

    assert response.status_code == 200
    assert response.content == b""
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["access-control-allow-methods"] == "GET, OPTIONS"
    assert response.headers["access-control-allow-headers"] == "Content-Type, Authorization"
    assert response.headers["access-control-max-age"] == "86400"
    assert github.requests == []


@pytest.mark.parametrize("method", ["POST", "PUT", "DELETE", "PATCH"])
def test_method_not_allowed(client, github, method):
    """Test that anything but GET and OPTIONS is rejected."""
    response = client.request(method, REPO_QUERY)

    assert response.status_code == 405
    assert response.json() == {"error": "Method not allowed"}
    assert response.headers["access-control-allow-origin"] == "*"
    assert github.requests == []


def test_badge_route(client):
    """Test /badge returns the total downloads badge."""
    response = client.get("/badge?owner=octo&repo=hello")

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/svg+xml; charset=UTF-8"
    assert response.headers["cache-control"] == "public, s-maxage=300, max-age=300"
    assert response.headers["vary"] == "Accept, Accept-Encoding"
    assert "<title>total downloads: 1.7K</title>" in response.text


def test_badge_latest_route(client):
    """Test /badge/latest returns the latest release badge."""
    response = client.get("/badge/latest?owner=octo&repo=hello")

    assert "<title>latest downloads: 1.2K</title>" in response.text


@pytest.mark.parametrize(
    "query",
    ["&format=svg", "&format=SVG", "&badge=1"],
)
def test_badge_query_switches(client, query):
    """Test that format=svg and badge=1 select badge output."""
    response = client.get(REPO_QUERY + query)

    assert response.headers["content-type"] == "image/svg+xml; charset=UTF-8"
    assert response.text.startswith('<?xml version="1.0" encoding="UTF-8"?>')


def test_badge_metric_query(client):
    """Test the metric query parameter."""
    latest = client.get(REPO_QUERY + "&badge=1&metric=latest")
    unknown = client.get(REPO_QUERY + "&badge=1&metric=weekly")

    assert "latest downloads: 1.2K" in latest.text
    assert "total downloads: 1.7K" in unknown.text


def test_badge_label_and_color(client):
    """Test custom label and color parameters."""
    response = client.get("/badge?owner=octo&repo=hello&label=%20installs%20&color=green")

    assert "<title>installs: 1.7K</title>" in response.text
    assert 'fill="#97CA00"' in response.text


def test_cached_badge_returned_unmodified(client, github):
    """Test that a cached badge is served as stored."""
    first = client.get("/badge?owner=octo&repo=hello")
    second = client.get("/badge?owner=octo&repo=hello")

    assert second.text == first.text
    assert second.headers["cache-control"] == first.headers["cache-control"]
    assert len(github.requests) == 2


def test_transferred_repository_follows_redirect(client, github):
    """Test that a 301 from GitHub for a moved repository is followed."""
    github.moved = {"old": "octo"}
    response = client.get("/?owner=old&repo=hello")

    assert response.status_code == 200
    data = response.json()
    assert data["repository"] == "old/hello"
    assert data["total_downloads"] == 1734
    assert "location" not in response.headers

    paths = sorted(r.url.path for r in github.requests)
    assert paths == [
        "/repos/octo/hello/releases",
        "/repos/octo/hello/releases/latest",
        "/repos/old/hello/releases",
        "/repos/old/hello/releases/latest",
    ]
