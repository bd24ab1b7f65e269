"""Repository layer for data access.

This layer hides external dependencies (Redis, the GitHub API) behind
protocol-based interfaces. Any class implementing the required methods
satisfies the protocol.
"""

from release_counter.protocols import ReleaseSource, ResponseCache

from .github_client import GitHubReleaseClient
from .memory_repository import MemoryResponseCache
from .redis_repository import RedisResponseCache

__all__ = [
    "ReleaseSource",
    "ResponseCache",
    "GitHubReleaseClient",
    "MemoryResponseCache",
    "RedisResponseCache",
]
