"""In-process implementation of ResponseCache.

Suitable for a single worker and for tests. Entries expire on a
monotonic clock.
"""

import threading
import time
from collections.abc import Callable

from release_counter.entities import CachedResponse


class MemoryResponseCache:
    """Dictionary-backed response cache.

    This class satisfies the ResponseCache protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._entries: dict[str, tuple[float, CachedResponse]] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def match(self, key: str) -> CachedResponse | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, response = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return response

    def put(self, key: str, response: CachedResponse, ttl: int) -> None:
        if ttl <= 0:
            return
        with self._lock:
            self._entries[key] = (self._clock() + ttl, response)

    def health_check(self) -> bool:
        return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
