"""Redis implementation of ResponseCache.

Entries are stored as JSON strings under `<prefix>:<key>` with a Redis
expiry equal to the response's shared-cache lifetime.
"""

import redis

from release_counter.config import Settings, get_redis_client
from release_counter.entities import CachedResponse


class RedisResponseCache:
    """Redis-backed response cache.

    This class satisfies the ResponseCache protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(
        self,
        redis_client: redis.Redis,
        key_prefix: str,
    ) -> None:
        """Initialize the Redis response cache.

        Args:
            redis_client: Redis client instance.
            key_prefix: Namespace for keys.
        """
        self._client = redis_client
        self._prefix = key_prefix

    @classmethod
    def create(cls, settings: Settings) -> "RedisResponseCache":
        """Factory method to create RedisResponseCache from settings.

        Args:
            settings: Application settings (Redis URL, key prefix)

        Returns:
            Configured RedisResponseCache
        """
        return cls(
            redis_client=get_redis_client(settings),
            key_prefix=settings.cache_key_prefix,
        )

    def _key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    def match(self, key: str) -> CachedResponse | None:
        """Look up a stored response.

        Args:
            key: Cache key derived from the inbound request

        Returns:
            The stored response, or None on a miss
        """
        raw = self._client.get(self._key(key))
        if raw is None:
            return None
        return CachedResponse.from_json(raw)  # type: ignore[arg-type]

    def put(self, key: str, response: CachedResponse, ttl: int) -> None:
        """Store a response with an expiry.

        Args:
            key: Cache key derived from the inbound request
            response: The response to store
            ttl: Time-to-live in seconds; non-positive values are not stored
        """
        if ttl <= 0:
            return
        self._client.set(self._key(key), response.to_json(), ex=ttl)

    def health_check(self) -> bool:
        """Check if Redis is accessible.

        Returns:
            True if healthy, False otherwise
        """
        try:
            return bool(self._client.ping())
        except redis.RedisError:
            return False

    @property
    def client(self) -> redis.Redis:
        """Get the Redis client."""
        return self._client
