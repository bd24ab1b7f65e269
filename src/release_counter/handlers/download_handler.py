"""HTTP handler for download-count and badge requests.

The handler owns everything HTTP-specific: preflight and method checks,
deciding between JSON and SVG, the response cache, response headers and
mapping failures to the JSON error envelope. Aggregation is delegated to
DownloadService.
"""

import hashlib
import json
import uuid
from typing import Any

from fastapi import BackgroundTasks, Request, Response, status
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import QueryParams

from release_counter.config import Settings
from release_counter.dto import DownloadStatsResponse, ErrorResponse
from release_counter.entities import BadgeMetric, CachedResponse
from release_counter.errors import ClientInputError, UpstreamError
from release_counter.protocols import ResponseCache
from release_counter.services import DownloadService, build_badge_request, render_badge_for
from release_counter.utils import bind_context, clear_context, get_logger

logger = get_logger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
    "Access-Control-Max-Age": "86400",
}

JSON_CONTENT_TYPE = "application/json; charset=UTF-8"
SVG_CONTENT_TYPE = "image/svg+xml; charset=UTF-8"

# Request headers that select between otherwise identical cache entries
CACHE_KEY_HEADERS = ("accept", "accept-encoding")


def path_segments(path: str) -> list[str]:
    return [segment for segment in path.split("/") if segment]


def wants_badge(segments: list[str], params: QueryParams) -> bool:
    """A badge is wanted for /badge/..., ?format=svg or ?badge=1."""
    if segments and segments[0] == "badge":
        return True

    fmt = params.get("format")
    if fmt and fmt.lower() == "svg":
        return True

    return params.get("badge") == "1"


def resolve_metric(segments: list[str], params: QueryParams) -> BadgeMetric:
    """Metric from /badge/<metric>, else ?metric=, else total."""
    route_metric = segments[1] if len(segments) > 1 and segments[0] == "badge" else None
    raw = (route_metric or params.get("metric") or "total").lower()
    return "latest" if raw == "latest" else "total"


def cache_key(request: Request) -> str:
    """Derive the response cache key from method, full URL and negotiation headers."""
    digest = hashlib.sha256()
    digest.update(request.method.encode())
    digest.update(b"\n")
    digest.update(str(request.url).encode())
    for name in CACHE_KEY_HEADERS:
        digest.update(b"\n")
        digest.update(request.headers.get(name, "").encode())
    return digest.hexdigest()


def json_headers(max_age: int) -> dict[str, str]:
    return {
        "Content-Type": JSON_CONTENT_TYPE,
        "Cache-Control": f"public, s-maxage={max_age}",
        **CORS_HEADERS,
    }


def badge_headers(max_age: int) -> dict[str, str]:
    return {
        "Content-Type": SVG_CONTENT_TYPE,
        "Cache-Control": f"public, s-maxage={max_age}, max-age={max_age}",
        "Vary": "Accept, Accept-Encoding",
        **CORS_HEADERS,
    }


def dump_json(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


def to_response(cached: CachedResponse, extra_headers: dict[str, str] | None = None) -> Response:
    headers = dict(cached.headers)
    if extra_headers:
        headers.update(extra_headers)
    return Response(content=cached.body, status_code=cached.status_code, headers=headers)


def error_response(error: ErrorResponse, status_code: int) -> Response:
    """Render the error envelope; errors are never cacheable."""
    body = dump_json(error.model_dump(mode="json", exclude_none=True))
    return Response(content=body, status_code=status_code, headers=json_headers(0))


class DownloadHandler:
    """Request pipeline for the download counter.

    Steps, in order:
    1. OPTIONS preflight and method check
    2. Repository resolution
    3. Response cache lookup
    4. On a miss: fetch, aggregate, build JSON or SVG, schedule cache write
    5. Failure mapping to {error, status?, detail?}

    Example:
        ```python
        handler = DownloadHandler(settings=settings, download_service=service, response_cache=cache)

        @app.api_route("/{path:path}", methods=["GET", "OPTIONS"])
        async def serve(request: Request, background_tasks: BackgroundTasks):
            return await handler.handle(request, background_tasks)
        ```
    """

    def __init__(
        self,
        settings: Settings,
        download_service: DownloadService,
        response_cache: ResponseCache,
    ) -> None:
        """Initialize the download handler.

        Args:
            settings: Read-only application settings (TTL)
            download_service: Service doing resolution and aggregation
            response_cache: Store for rendered responses
        """
        self._settings = settings
        self._service = download_service
        self._cache = response_cache

    async def handle(self, request: Request, background_tasks: BackgroundTasks) -> Response:
        """Serve one inbound request.

        Args:
            request: The inbound request
            background_tasks: Where the post-response cache write is scheduled

        Returns:
            JSON statistics, an SVG badge, an empty preflight response or an error
        """
        bind_context(request_id=uuid.uuid4().hex[:8])
        try:
            return await self._dispatch(request, background_tasks)
        finally:
            clear_context()

    async def _dispatch(self, request: Request, background_tasks: BackgroundTasks) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=status.HTTP_200_OK, headers=CORS_HEADERS)

        if request.method != "GET":
            return error_response(
                ErrorResponse(error="Method not allowed"),
                status.HTTP_405_METHOD_NOT_ALLOWED,
            )

        params = request.query_params
        segments = path_segments(request.url.path)
        badge = wants_badge(segments, params)

        try:
            repository = self._service.resolve(params.get("owner"), params.get("repo"))
        except ClientInputError as e:
            return error_response(ErrorResponse(error=e.message), e.status_code)

        key = cache_key(request)
        cached = await self._lookup(key)
        if cached is not None:
            logger.debug("Cache hit", repository=repository, badge=badge)
            # Badges are returned untouched; JSON always gets CORS re-applied
            return to_response(cached) if badge else to_response(cached, CORS_HEADERS)

        logger.debug("Cache miss", repository=repository, badge=badge)

        ttl = self._settings.cache_ttl_seconds
        try:
            stats = await self._service.get_stats(repository)
            if badge:
                rendered = self._render_badge(stats, segments, params, ttl)
            else:
                rendered = CachedResponse(
                    status_code=status.HTTP_200_OK,
                    body=dump_json(stats.model_dump(mode="json")),
                    headers=json_headers(ttl),
                )
        except UpstreamError as e:
            return error_response(
                ErrorResponse(error=str(e), status=e.status, detail=e.detail),
                e.status_code,
            )
        except Exception:
            logger.exception("Unhandled error", repository=repository)
            return error_response(
                ErrorResponse(error="Internal Server Error"),
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        background_tasks.add_task(self._store, key, rendered, ttl)
        return to_response(rendered)

    def _render_badge(
        self,
        stats: DownloadStatsResponse,
        segments: list[str],
        params: QueryParams,
        ttl: int,
    ) -> CachedResponse:
        badge_request = build_badge_request(
            metric=resolve_metric(segments, params),
            label=params.get("label"),
            color=params.get("color"),
        )
        svg = render_badge_for(
            badge_request,
            total_downloads=stats.total_downloads,
            latest_downloads=stats.latest_release.download_count,
        )
        return CachedResponse(status_code=status.HTTP_200_OK, body=svg, headers=badge_headers(ttl))

    async def _lookup(self, key: str) -> CachedResponse | None:
        # An unreachable cache degrades to a miss
        try:
            return await run_in_threadpool(self._cache.match, key)
        except Exception:
            logger.warning("Cache lookup failed", exc_info=True)
            return None

    def _store(self, key: str, response: CachedResponse, ttl: int) -> None:
        """Write a response to the cache; runs after the response is sent."""
        try:
            self._cache.put(key, response, ttl)
        except Exception:
            logger.warning("Cache write failed", exc_info=True)
