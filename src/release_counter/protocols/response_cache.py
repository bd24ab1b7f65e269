"""Response cache protocol.

Defines the interface for any key -> HTTP response store used to serve
repeated identical requests without calling GitHub again.

Implementations:
- Redis (default, shared between workers)
- In-process memory (single worker, tests)
"""

from typing import Protocol, runtime_checkable

from release_counter.entities import CachedResponse


@runtime_checkable
class ResponseCache(Protocol):
    """Protocol for response cache backends."""

    def match(self, key: str) -> CachedResponse | None:
        """Look up a stored response.

        Args:
            key: Cache key derived from the inbound request

        Returns:
            The stored response, or None on a miss or expired entry
        """
        ...

    def put(self, key: str, response: CachedResponse, ttl: int) -> None:
        """Store a response.

        Args:
            key: Cache key derived from the inbound request
            response: The response to store
            ttl: Time-to-live in seconds
        """
        ...

    def health_check(self) -> bool:
        """Check if the backend is reachable.

        Returns:
            True if healthy, False otherwise
        """
        ...
