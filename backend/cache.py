"""IP Weather Backend — In-memory cache with TTL"""

import time
import asyncio
import logging
from typing import Any, Optional

logger = logging.getLogger("ipweather.cache")


class TTLCache:
    """In-memory cache with per-key expiry, evicted lazily on read.

    ``max_size`` of 0 leaves the cache unbounded. Nothing is swept in the
    background unless :func:`sweep_periodically` is running.
    """

    def __init__(self, default_ttl: int = 3600, max_size: int = 0, name: str = "cache"):
        self._store: dict[str, tuple[Any, float]] = {}
        self._default_ttl = default_ttl
        self._max_size = max_size
        self.name = name

    def __len__(self) -> int:
        return len(self._store)

    def get(self, key: str) -> Optional[Any]:
        entry = self._store.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if time.time() >= expires_at:
            del self._store[key]
            logger.debug(f"{self.name}: expired entry for {key}")
            return None
        return value

    def set(self, key: str, value: Any, ttl: Optional[int] = None, expires_at: Optional[float] = None) -> float:
        """Store ``value`` and return its expiry timestamp.

        ``expires_at`` wins over ``ttl``; with neither, the default TTL applies.
        """
        # Enforce max size — drop expired first, then earliest-expiring entries
        if self._max_size and len(self._store) >= self._max_size and key not in self._store:
            self.evict_expired()
            while len(self._store) >= self._max_size:
                oldest_key = min(self._store, key=lambda k: self._store[k][1])
                del self._store[oldest_key]
        if expires_at is None:
            expires_at = time.time() + (ttl if ttl is not None else self._default_ttl)
        self._store[key] = (value, expires_at)
        return expires_at

    def clear(self):
        self._store.clear()

    def evict_expired(self) -> int:
        now = time.time()
        expired = [k for k, (_, exp) in self._store.items() if now >= exp]
        for k in expired:
            del self._store[k]
        return len(expired)


async def sweep_periodically(caches: list[TTLCache], interval: float):
    """Evict expired entries from every cache each ``interval`` seconds, until cancelled."""
    while True:
        await asyncio.sleep(interval)
        for c in caches:
            removed = c.evict_expired()
            if removed:
                logger.info(f"{c.name}: swept {removed} expired entries")
