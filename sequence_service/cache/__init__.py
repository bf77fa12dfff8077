"""
In-process cache: opaque byte store and the key families built on it.
"""

from .keys import CacheKey
from .store import CacheStore, InMemoryCacheStore

__all__ = [
    "CacheKey",
    "CacheStore",
    "InMemoryCacheStore",
]
