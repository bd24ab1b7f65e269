import math
import os
from dataclasses import dataclass, field
from functools import lru_cache

import redis
from dotenv import load_dotenv

load_dotenv()

DEFAULT_CACHE_TTL = 300


def parse_ttl(value: str | None, fallback: int = DEFAULT_CACHE_TTL) -> int:
    """Parse a TTL in seconds, falling back on missing or invalid values.

    Args:
        value: Raw value, usually from the environment
        fallback: TTL used when the value is empty, non-numeric or non-positive

    Returns:
        The TTL in whole seconds
    """
    if not value:
        return fallback

    try:
        parsed = float(value)
    except ValueError:
        return fallback

    if not math.isfinite(parsed):
        return fallback

    seconds = int(parsed)
    return seconds if seconds > 0 else fallback


def _env(name: str, default: str | None = None):
    return field(default_factory=lambda: os.getenv(name, default))


def _env_float(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables.

    Each instance reads the environment when it is created, so tests and
    the application factory can build one explicitly and pass it around.
    """

    # Repository resolution
    default_repository: str | None = _env("DEFAULT_REPOSITORY")

    # GitHub
    github_token: str | None = _env("GITHUB_TOKEN")
    github_api_base: str = _env("GITHUB_API_BASE", "https://api.github.com")
    upstream_timeout: float = field(default_factory=lambda: _env_float("UPSTREAM_TIMEOUT_SECONDS", "10.0"))

    # Cache
    cache_ttl_seconds: int = field(default_factory=lambda: parse_ttl(os.getenv("CACHE_TTL_SECONDS")))
    cache_backend: str = _env("CACHE_BACKEND", "redis")
    cache_key_prefix: str = _env("CACHE_KEY_PREFIX", "release_counter")

    # Redis
    redis_url: str = _env("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = _env("REDIS_PASSWORD")

    # API
    api_host: str = _env("API_HOST", "0.0.0.0")
    api_port: int = field(default_factory=lambda: int(os.getenv("API_PORT", "8000")))
    api_reload: bool = field(default_factory=lambda: os.getenv("API_RELOAD", "false").lower() == "true")

    @property
    def token(self) -> str | None:
        """Return the trimmed GitHub token, or None when unset or blank."""
        if self.github_token is None:
            return None
        return self.github_token.strip() or None

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.cache_backend not in ("redis", "memory"):
            raise ValueError(f"CACHE_BACKEND must be 'redis' or 'memory', got {self.cache_backend!r}")

        if self.upstream_timeout <= 0:
            raise ValueError("UPSTREAM_TIMEOUT_SECONDS must be positive")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def get_redis_client(settings: Settings | None = None) -> redis.Redis:
    """Create a Redis client instance."""
    settings = settings or get_settings()
    return redis.from_url(
        settings.redis_url,
        password=settings.redis_password,
        decode_responses=True,
    )
