import httpx
from fastapi import BackgroundTasks, FastAPI, Request, Response

from release_counter.api.dependencies import HandlerDep, make_lifespan
from release_counter.config import Settings, get_settings
from release_counter.protocols import ResponseCache

ALL_METHODS = ["GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE"]


def create_app(
    settings: Settings | None = None,
    response_cache: ResponseCache | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Create the release counter application.

    Args:
        settings: Application settings. Defaults to the environment.
        response_cache: Cache backend override. Defaults to settings.cache_backend.
        http_client: httpx client used for GitHub calls. Created lazily if None.

    Returns:
        The configured FastAPI app
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Release Download Counter",
        description="GitHub release download counts as JSON or SVG badges",
        version="0.1.0",
        lifespan=make_lifespan(settings, response_cache=response_cache, http_client=http_client),
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.api_route("/{path:path}", methods=ALL_METHODS, include_in_schema=False)
    async def serve(request: Request, background_tasks: BackgroundTasks, handler: HandlerDep) -> Response:
        """
        Serve download statistics.

        Returns JSON by default. `/badge`, `/badge/latest`, `?format=svg` or
        `?badge=1` return an SVG badge instead.
        """
        return await handler.handle(request, background_tasks)

    return app


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "release_counter.api.app:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
