"""
Cache Store

Byte-keyed, byte-valued in-process store with per-entry expiry and a hard
memory ceiling. Knows nothing about sequences or steps; higher layers decide
what the keys mean.
"""

import threading
import time
import zlib
from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

import structlog

logger = structlog.get_logger()

MEGABYTE = 1024 * 1024


class CacheStore(ABC):
    """
    Abstract cache store.

    Callers must tolerate silent eviction at any time: the store is an
    accelerator, never the system of record.
    """

    @abstractmethod
    def set(self, key: str, value: bytes) -> None:
        """Store value under key, overwriting any prior entry."""
        pass

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """Return the stored value, or None when absent or expired."""
        pass

    @abstractmethod
    def evict(self, key: str) -> None:
        """Remove a single entry if present."""
        pass

    @abstractmethod
    def evict_all(self) -> None:
        """Remove every entry."""
        pass

    @abstractmethod
    def stats(self) -> Dict[str, int]:
        """Return occupancy and hit/miss counters."""
        pass


@dataclass
class _Shard:
    """One independently locked partition of the store."""

    entries: "OrderedDict[str, Tuple[bytes, float]]"
    lock: threading.Lock
    bytes_used: int = 0


class InMemoryCacheStore(CacheStore):
    """
    Sharded in-memory cache store.

    Keys are spread over shards by CRC32 so writers to different keys rarely
    contend on the same lock. Each shard keeps entries in insertion order;
    when a shard exceeds its share of the memory ceiling the oldest entries
    are dropped first. Expired entries are removed lazily on read.
    """

    def __init__(
        self,
        shards: int = 2,
        life_window_seconds: float = 30,
        hard_max_cache_size_mb: int = 10,
        clock: Callable[[], float] = time.monotonic,
    ):
        if shards < 1:
            raise ValueError("shards must be at least 1")
        if life_window_seconds <= 0:
            raise ValueError("life_window_seconds must be positive")
        if hard_max_cache_size_mb < 0:
            raise ValueError("hard_max_cache_size_mb cannot be negative")

        self.life_window_seconds = life_window_seconds
        self.clock = clock
        # 0 means unbounded
        self.shard_capacity = (
            hard_max_cache_size_mb * MEGABYTE // shards
            if hard_max_cache_size_mb
            else 0
        )
        self._shards = [
            _Shard(entries=OrderedDict(), lock=threading.Lock())
            for _ in range(shards)
        ]
        self._counter_lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def _shard_for(self, key: str) -> _Shard:
        return self._shards[zlib.crc32(key.encode("utf-8")) % len(self._shards)]

    @staticmethod
    def _entry_size(key: str, value: bytes) -> int:
        return len(key.encode("utf-8")) + len(value)

    def _count(self, hits: int = 0, misses: int = 0, evictions: int = 0) -> None:
        with self._counter_lock:
            self._hits += hits
            self._misses += misses
            self._evictions += evictions

    def set(self, key: str, value: bytes) -> None:
        if not isinstance(value, (bytes, bytearray)):
            raise TypeError(f"value must be bytes, got {type(value).__name__}")

        value = bytes(value)
        size = self._entry_size(key, value)
        shard = self._shard_for(key)

        if self.shard_capacity and size > self.shard_capacity:
            logger.warning(
                "Cache entry larger than shard capacity, not stored",
                key=key,
                size=size,
                shard_capacity=self.shard_capacity,
            )
            self.evict(key)
            return

        evicted = 0
        with shard.lock:
            previous = shard.entries.pop(key, None)
            if previous is not None:
                shard.bytes_used -= self._entry_size(key, previous[0])

            shard.entries[key] = (value, self.clock() + self.life_window_seconds)
            shard.bytes_used += size

            while self.shard_capacity and shard.bytes_used > self.shard_capacity:
                oldest_key, (oldest_value, _) = shard.entries.popitem(last=False)
                shard.bytes_used -= self._entry_size(oldest_key, oldest_value)
                evicted += 1

        if evicted:
            self._count(evictions=evicted)
            logger.debug("Cache evicted oldest entries", count=evicted)

    def get(self, key: str) -> Optional[bytes]:
        shard = self._shard_for(key)

        with shard.lock:
            entry = shard.entries.get(key)
            if entry is not None and entry[1] <= self.clock():
                del shard.entries[key]
                shard.bytes_used -= self._entry_size(key, entry[0])
                entry = None

        if entry is None:
            self._count(misses=1)
            return None

        self._count(hits=1)
        return entry[0]

    def evict(self, key: str) -> None:
        shard = self._shard_for(key)

        with shard.lock:
            entry = shard.entries.pop(key, None)
            if entry is not None:
                shard.bytes_used -= self._entry_size(key, entry[0])

    def evict_all(self) -> None:
        for shard in self._shards:
            with shard.lock:
                shard.entries.clear()
                shard.bytes_used = 0

    def stats(self) -> Dict[str, int]:
        entries = 0
        bytes_used = 0
        for shard in self._shards:
            with shard.lock:
                entries += len(shard.entries)
                bytes_used += shard.bytes_used

        with self._counter_lock:
            return {
                "entries": entries,
                "bytes_used": bytes_used,
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
            }

    def __len__(self) -> int:
        return self.stats()["entries"]
