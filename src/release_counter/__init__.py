"""Release Counter - GitHub release download counts as JSON or SVG badges.

This package provides a layered architecture:

Layers:
    - protocols: Interface contracts (ResponseCache, ReleaseSource)
    - repositories: Data access implementations (Redis, memory, GitHub)
    - services: Business logic (aggregation, badge rendering)
    - handlers: HTTP request pipeline
    - dto: Data transfer objects (upstream payloads, API contracts)
    - entities: Domain models (internal)

For HTTP API:
    ```python
    from release_counter.api import create_app

    app = create_app()
    ```
"""

from release_counter.config import Settings, get_redis_client, get_settings
from release_counter.dto import DownloadStatsResponse, ErrorResponse, GitHubAsset, GitHubRelease
from release_counter.entities import BadgeRequest, CachedResponse
from release_counter.errors import ClientInputError, UpstreamError
from release_counter.handlers import DownloadHandler
from release_counter.protocols import ReleaseSource, ResponseCache
from release_counter.repositories import GitHubReleaseClient, MemoryResponseCache, RedisResponseCache
from release_counter.services import DownloadService

__all__ = [
    # Configuration
    "Settings",
    "get_settings",
    "get_redis_client",
    # Protocols (interfaces)
    "ReleaseSource",
    "ResponseCache",
    # Services (business logic)
    "DownloadService",
    # Handlers (HTTP)
    "DownloadHandler",
    # Repositories (data access)
    "GitHubReleaseClient",
    "MemoryResponseCache",
    "RedisResponseCache",
    # Entities (domain models)
    "BadgeRequest",
    "CachedResponse",
    # DTOs (API contracts)
    "DownloadStatsResponse",
    "ErrorResponse",
    "GitHubAsset",
    "GitHubRelease",
    # Errors
    "ClientInputError",
    "UpstreamError",
]
