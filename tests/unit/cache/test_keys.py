"""
Unit tests for cache key derivation.
"""

from uuid import UUID, uuid4

import pytest

from sequence_service.cache import CacheKey


class TestCacheKey:
    """Test CacheKey value object."""

    def test_sequences_page_key(self):
        """List page keys follow the sequences-{size}-{page} format."""
        key = CacheKey.sequences_page(50, 3)

        assert key.value == "sequences-50-3"
        assert str(key) == "sequences-50-3"

    def test_sequence_key(self):
        """Detail keys embed the canonical external id."""
        external_id = uuid4()
        key = CacheKey.sequence(external_id)

        assert key.value == f"sequence-{external_id}"

    def test_sequence_key_canonicalizes_string_ids(self):
        """Upper-case and UUID inputs produce the same key."""
        external_id = UUID("0b6f2d4e-8a1c-4f0e-9a7b-3c2d1e0f9a8b")

        assert CacheKey.sequence(str(external_id).upper()) == CacheKey.sequence(
            external_id
        )

    def test_sequence_key_rejects_malformed_id(self):
        """Malformed ids never become keys."""
        with pytest.raises(ValueError):
            CacheKey.sequence("not-a-uuid")

    def test_negative_page_values_rejected(self):
        """Key derivation expects already clamped values."""
        with pytest.raises(ValueError, match="non-negative"):
            CacheKey.sequences_page(-1, 0)
        with pytest.raises(ValueError, match="non-negative"):
            CacheKey.sequences_page(10, -1)

    def test_invalid_key_empty(self):
        """Test invalid empty key."""
        with pytest.raises(ValueError, match="Cache key cannot be empty"):
            CacheKey("")

    def test_invalid_key_whitespace(self):
        """Test invalid key with whitespace."""
        with pytest.raises(ValueError, match="Cache key cannot contain whitespace"):
            CacheKey("sequences 1 2")

    def test_invalid_key_too_long(self):
        """Test invalid key too long."""
        with pytest.raises(ValueError, match="Cache key too long"):
            CacheKey("a" * 251)

    def test_page_key_derivation_is_deterministic(self):
        """Deriving the same key twice yields identical strings."""
        for size, page in [(0, 0), (1, 10), (50, 10000)]:
            assert str(CacheKey.sequences_page(size, page)) == str(
                CacheKey.sequences_page(size, page)
            )

    def test_page_keys_never_collide(self):
        """Distinct (size, page) pairs map to distinct keys."""
        keys = {
            str(CacheKey.sequences_page(size, page))
            for size in range(0, 51)
            for page in range(0, 10001)
        }

        assert len(keys) == 51 * 10001

    def test_page_and_detail_families_disjoint(self):
        """A detail key can never equal a list page key."""
        detail = str(CacheKey.sequence(uuid4()))

        assert not detail.startswith("sequences-")
