"""Dependency wiring for the FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services built once in the lifespan and stored in app.state
    - Dependency functions retrieve them from request.app.state
    - No global mutable state
"""

from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Annotated

import httpx
from fastapi import Depends, FastAPI, Request

from release_counter.config import Settings
from release_counter.handlers import DownloadHandler
from release_counter.protocols import ResponseCache
from release_counter.repositories import GitHubReleaseClient, MemoryResponseCache, RedisResponseCache
from release_counter.services import DownloadService
from release_counter.utils import configure_logging, get_logger

logger = get_logger(__name__)


def build_response_cache(settings: Settings) -> ResponseCache:
    """Create the cache backend named by settings.cache_backend."""
    if settings.cache_backend == "memory":
        return MemoryResponseCache()
    return RedisResponseCache.create(settings)


def get_handler(request: Request) -> DownloadHandler:
    """Dependency injection for DownloadHandler from app.state.

    Args:
        request: FastAPI Request object

    Returns:
        The DownloadHandler instance from app.state

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "download_handler", None)
    if handler is None:
        raise RuntimeError("DownloadHandler not initialized. Check lifespan setup.")
    return handler


def make_lifespan(
    settings: Settings,
    response_cache: ResponseCache | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> Callable[[FastAPI], AbstractAsyncContextManager[None]]:
    """Build the lifespan context manager for the app.

    Args:
        settings: Application settings
        response_cache: Cache backend override (tests); built from settings if None
        http_client: httpx client override for GitHub calls (tests)

    Returns:
        A lifespan callable for FastAPI
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Initialize all layers and store them in app.state.

        1. Cache backend and GitHub client (data access)
        2. Service (business logic) - app.state.download_service
        3. Handler (HTTP pipeline) - app.state.download_handler
        """
        configure_logging()

        cache = response_cache or build_response_cache(settings)
        release_source = GitHubReleaseClient.create(settings, http_client=http_client)
        download_service = DownloadService(settings=settings, release_source=release_source)
        download_handler = DownloadHandler(
            settings=settings,
            download_service=download_service,
            response_cache=cache,
        )

        app.state.settings = settings
        app.state.response_cache = cache
        app.state.download_service = download_service
        app.state.download_handler = download_handler

        logger.info(
            "Release counter started",
            default_repository=settings.default_repository,
            authenticated=settings.token is not None,
            cache_backend=type(cache).__name__,
            cache_healthy=cache.health_check(),
            cache_ttl_seconds=settings.cache_ttl_seconds,
        )

        try:
            yield
        finally:
            await release_source.close()
            del app.state.download_handler
            del app.state.download_service
            del app.state.response_cache
            del app.state.settings
            logger.info("Release counter shut down")

    return lifespan


# Type alias for cleaner dependency injection
HandlerDep = Annotated[DownloadHandler, Depends(get_handler)]
