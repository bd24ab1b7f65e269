"""Protocol interfaces for swappable implementations.

Protocols enable:
- Swapping the cache backend (Redis, memory) without touching the handler
- Unit testing with fake implementations
"""

from .release_source import ReleaseSource
from .response_cache import ResponseCache

__all__ = [
    "ReleaseSource",
    "ResponseCache",
]
