"""
Cache Keys

Immutable cache key value object. The two key families are part of the
compatibility contract:

- ``sequences-{size}-{page}`` for list pages
- ``sequence-{externalId}`` for a single sequence
"""

from dataclasses import dataclass
from typing import Union
from uuid import UUID

from ..constants import SEQUENCE_LIST_KEY_PREFIX, SEQUENCE_DETAIL_KEY_PREFIX


@dataclass(frozen=True)
class CacheKey:
    """
    Immutable cache key value object.

    Enforces key naming conventions and provides validation.
    """

    value: str

    def __post_init__(self) -> None:
        """Validate cache key format."""
        if not self.value:
            raise ValueError("Cache key cannot be empty")

        if len(self.value) > 250:
            raise ValueError("Cache key too long (max 250 characters)")

        if any(char.isspace() for char in self.value):
            raise ValueError("Cache key cannot contain whitespace")

    def __str__(self) -> str:
        return self.value

    @classmethod
    def sequences_page(cls, size: int, page: int) -> "CacheKey":
        """Create list page cache key from the effective (clamped) size and page."""
        if size < 0 or page < 0:
            raise ValueError("Page size and page index must be non-negative")
        return cls(f"{SEQUENCE_LIST_KEY_PREFIX}-{size}-{page}")

    @classmethod
    def sequence(cls, external_id: Union[str, UUID]) -> "CacheKey":
        """Create single sequence cache key from its external identifier."""
        return cls(f"{SEQUENCE_DETAIL_KEY_PREFIX}-{UUID(str(external_id))}")
