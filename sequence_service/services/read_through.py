"""
Read-Through Cache

Cache-aside policy over an opaque CacheStore:

- reads consult the store first and populate it only after a successful load
- writers invalidate after their transaction has committed
- store failures are logged and counted, never raised to the request

A reader whose load began before a concurrent write committed can still
store pre-write bytes after the writer's eviction. Such an entry is served
for at most one life window (CACHE_LIFE_WINDOW) before it expires.
"""

from typing import Awaitable, Callable

import structlog
from prometheus_client import Counter

from ..cache import CacheKey, CacheStore

logger = structlog.get_logger()

CACHE_HITS = Counter("sequence_cache_hits_total", "Read-through cache hits")
CACHE_MISSES = Counter("sequence_cache_misses_total", "Read-through cache misses")
CACHE_INVALIDATIONS = Counter(
    "sequence_cache_invalidations_total",
    "Cache invalidations by scope",
    ["scope"],
)
CACHE_FAILURES = Counter(
    "sequence_cache_failures_total",
    "Cache store operations that raised",
    ["operation"],
)


class ReadThroughCache:
    """
    Cache-aside orchestration shared by the sequence and step services.

    The store is passed in explicitly; one instance is created per process.
    """

    def __init__(self, store: CacheStore):
        self.store = store

    async def fetch(self, key: CacheKey, loader: Callable[[], Awaitable[bytes]]) -> bytes:
        """
        Return cached bytes for key, or load, cache and return them.

        Args:
            key: Derived cache key
            loader: Coroutine factory reading through the repository and
                serializing the result

        Raises:
            Whatever the loader raises; nothing is cached in that case
        """
        cached = self._get(key)
        if cached is not None:
            CACHE_HITS.inc()
            logger.debug("Cache hit", key=str(key))
            return cached

        CACHE_MISSES.inc()
        payload = await loader()
        self._set(key, payload)

        return payload

    def invalidate(self, key: CacheKey) -> None:
        """Drop one key. Call only after the write has committed."""
        try:
            self.store.evict(str(key))
            CACHE_INVALIDATIONS.labels(scope="key").inc()
            logger.debug("Cache key invalidated", key=str(key))
        except Exception as e:
            CACHE_FAILURES.labels(operation="evict").inc()
            logger.warning("Cache eviction failed", key=str(key), error=str(e))

    def invalidate_all(self) -> None:
        """Drop every key. Call only after the write has committed."""
        try:
            self.store.evict_all()
            CACHE_INVALIDATIONS.labels(scope="all").inc()
            logger.debug("Cache cleared")
        except Exception as e:
            CACHE_FAILURES.labels(operation="evict_all").inc()
            logger.warning("Cache clear failed", error=str(e))

    def _get(self, key: CacheKey):
        try:
            return self.store.get(str(key))
        except Exception as e:
            CACHE_FAILURES.labels(operation="get").inc()
            logger.warning("Cache read failed, reading through", key=str(key), error=str(e))
            return None

    def _set(self, key: CacheKey, payload: bytes) -> None:
        try:
            self.store.set(str(key), payload)
        except Exception as e:
            CACHE_FAILURES.labels(operation="set").inc()
            logger.warning("Cache populate failed", key=str(key), error=str(e))
