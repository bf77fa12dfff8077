"""
Unit tests for SequenceService.

Repositories are AsyncMock fakes; the cache is a real in-memory store so
invalidation is observed through actual keys.
"""

import json
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from sequence_service.cache import CacheKey
from sequence_service.core.errors import (
    SequenceNotFound,
    StorageFailure,
    ValidationFailure,
)
from sequence_service.repositories import SequenceRepository
from sequence_service.schemas import CreateSequenceRequest, UpdateSequenceRequest
from sequence_service.services import ReadThroughCache, SequenceService
from tests.fixtures.aggregates import make_sequence, mark_persisted


class TestSequenceService:
    """Test SequenceService orchestration."""

    @pytest.fixture
    def repository(self):
        """Create mock sequence repository."""
        return AsyncMock(spec=SequenceRepository)

    @pytest.fixture
    def service(self, repository, cache_store):
        return SequenceService(
            repository=repository,
            cache=ReadThroughCache(cache_store),
            max_page_size=50,
        )

    @pytest.fixture
    def create_request(self):
        return CreateSequenceRequest.model_validate(
            {
                "name": "Onboarding",
                "openTrackingEnabled": False,
                "clickTrackingEnabled": True,
                "steps": [
                    {"mailSubject": "s1", "mailContent": "c1", "stepNumber": 1},
                    {"mailSubject": "s2", "mailContent": "c2"},
                ],
            }
        )

    def _fill_cache(self, cache_store):
        keys = [
            str(CacheKey.sequences_page(50, 0)),
            str(CacheKey.sequences_page(10, 3)),
            str(CacheKey.sequence(uuid4())),
        ]
        for key in keys:
            cache_store.set(key, b"stale")
        return keys

    # List

    @pytest.mark.parametrize(
        "size,page,expected_limit,expected_page",
        [
            (50, 0, 50, 0),
            (500, 2, 50, 2),
            (-5, 1, 0, 1),
            (10, -3, 10, 0),
        ],
    )
    async def test_list_clamps_size_and_page(
        self,
        service,
        repository,
        cache_store,
        size,
        page,
        expected_limit,
        expected_page,
    ):
        """Size is capped to [0, max]; page is floored at 0."""
        repository.find_all_aggregates.return_value = []

        body = await service.list_sequences(size, page)

        assert body == b"[]"
        repository.find_all_aggregates.assert_awaited_once_with(
            limit=expected_limit, offset=expected_limit * expected_page
        )
        key = CacheKey.sequences_page(expected_limit, expected_page)
        assert cache_store.get(str(key)) == b"[]"

    async def test_list_second_read_served_from_cache(self, service, repository):
        """Repeated list reads hit the repository once."""
        repository.find_all_aggregates.return_value = [make_sequence(persisted=True)]

        first = await service.list_sequences(50, 0)
        second = await service.list_sequences(50, 0)

        assert first == second
        assert repository.find_all_aggregates.await_count == 1
        payload = json.loads(first)
        assert payload[0]["name"] == "Onboarding"
        assert payload[0]["createdAt"] == "2024-05-01T12:30:15Z"
        assert payload[0]["lastUpdatedAt"] is None

    async def test_over_cap_and_cap_share_a_key(self, service, repository):
        """Requests clamped to the same effective size share one cache entry."""
        repository.find_all_aggregates.return_value = []

        await service.list_sequences(50, 1)
        await service.list_sequences(1000, 1)

        assert repository.find_all_aggregates.await_count == 1

    # Detail

    async def test_get_sequence_caches_detail(self, service, repository, cache_store):
        """A detail read populates sequence-{id}."""
        sequence = make_sequence(persisted=True)
        repository.find_aggregate_by_external_id.return_value = sequence

        body = await service.get_sequence(sequence.external_id)

        assert json.loads(body)["id"] == str(sequence.external_id)
        assert cache_store.get(str(CacheKey.sequence(sequence.external_id))) == body

    async def test_get_missing_sequence_not_cached(
        self, service, repository, cache_store
    ):
        """Not-found reads propagate and cache nothing."""
        external_id = uuid4()
        repository.find_aggregate_by_external_id.side_effect = SequenceNotFound(
            external_id
        )

        with pytest.raises(SequenceNotFound):
            await service.get_sequence(external_id)

        assert len(cache_store) == 0

    # Create

    async def test_create_sequence_persists_aggregate(
        self, service, repository, create_request
    ):
        """Create builds one aggregate with every step."""
        repository.create_aggregate.side_effect = mark_persisted

        response = await service.create_sequence(create_request)

        repository.create_aggregate.assert_awaited_once()
        sequence = repository.create_aggregate.await_args.args[0]
        assert sequence.name == "Onboarding"
        assert sequence.click_tracking_enabled is True
        assert [step.mail_subject for step in sequence.steps] == ["s1", "s2"]
        assert response.id == str(sequence.external_id)
        assert len(response.steps) == 2
        assert response.steps[0].step_number == 1
        assert response.steps[1].step_number is None

    async def test_create_sequence_invalidates_everything(
        self, service, repository, cache_store, create_request
    ):
        """A new sequence may belong on any page, so the cache is cleared."""
        self._fill_cache(cache_store)
        repository.create_aggregate.side_effect = mark_persisted

        await service.create_sequence(create_request)

        assert len(cache_store) == 0

    async def test_duplicate_step_numbers_rejected_before_storage(
        self, service, repository
    ):
        """Two steps sharing a number never reach the repository."""
        request = CreateSequenceRequest.model_validate(
            {
                "name": "Dupes",
                "steps": [
                    {"mailSubject": "a", "mailContent": "a", "stepNumber": 2},
                    {"mailSubject": "b", "mailContent": "b", "stepNumber": 2},
                ],
            }
        )

        with pytest.raises(ValidationFailure, match="step number 2"):
            await service.create_sequence(request)

        repository.create_aggregate.assert_not_awaited()

    async def test_unnumbered_steps_are_not_duplicates(self, service, repository):
        """Steps without a number never conflict."""
        request = CreateSequenceRequest.model_validate(
            {
                "name": "Loose",
                "steps": [
                    {"mailSubject": "a", "mailContent": "a"},
                    {"mailSubject": "b", "mailContent": "b"},
                ],
            }
        )
        repository.create_aggregate.side_effect = mark_persisted

        await service.create_sequence(request)

        repository.create_aggregate.assert_awaited_once()

    async def test_failed_create_keeps_cache(
        self, service, repository, cache_store, create_request
    ):
        """Nothing committed, nothing invalidated."""
        keys = self._fill_cache(cache_store)
        repository.create_aggregate.side_effect = StorageFailure("create_aggregate")

        with pytest.raises(StorageFailure):
            await service.create_sequence(create_request)

        assert all(cache_store.get(key) == b"stale" for key in keys)

    # Update

    async def test_update_applies_provided_flags_only(self, service, repository):
        """Absent flags keep their stored values."""
        sequence = make_sequence(persisted=True)
        sequence.click_tracking_enabled = True
        repository.find_aggregate_by_external_id.return_value = sequence
        repository.update_aggregate.side_effect = lambda s: s

        response = await service.update_sequence(
            sequence.external_id,
            UpdateSequenceRequest.model_validate({"openTrackingEnabled": True}),
        )

        updated = repository.update_aggregate.await_args.args[0]
        assert updated.open_tracking_enabled is True
        assert updated.click_tracking_enabled is True
        assert response.open_tracking_enabled is True

    async def test_update_invalidates_every_list_page(
        self, service, repository, cache_store
    ):
        """After a top-level update every cached page is a miss."""
        keys = self._fill_cache(cache_store)
        sequence = make_sequence(persisted=True)
        repository.find_aggregate_by_external_id.return_value = sequence
        repository.update_aggregate.side_effect = lambda s: s

        await service.update_sequence(
            sequence.external_id,
            UpdateSequenceRequest.model_validate({"clickTrackingEnabled": True}),
        )

        assert all(cache_store.get(key) is None for key in keys)

    async def test_update_missing_sequence(self, service, repository, cache_store):
        """Not found propagates and leaves the cache alone."""
        keys = self._fill_cache(cache_store)
        external_id = uuid4()
        repository.find_aggregate_by_external_id.side_effect = SequenceNotFound(
            external_id
        )

        with pytest.raises(SequenceNotFound):
            await service.update_sequence(external_id, UpdateSequenceRequest())

        repository.update_aggregate.assert_not_awaited()
        assert all(cache_store.get(key) == b"stale" for key in keys)

    # Delete

    async def test_delete_sequence_clears_cache(self, service, repository, cache_store):
        """A successful delete clears the cache."""
        self._fill_cache(cache_store)
        repository.delete_aggregate.return_value = True

        await service.delete_sequence(uuid4())

        assert len(cache_store) == 0

    async def test_delete_missing_sequence(self, service, repository, cache_store):
        """Deleting nothing is a not-found."""
        keys = self._fill_cache(cache_store)
        repository.delete_aggregate.return_value = False

        with pytest.raises(SequenceNotFound):
            await service.delete_sequence(uuid4())

        assert all(cache_store.get(key) == b"stale" for key in keys)


class TestEffectivePage:
    """Test page clamping in isolation."""

    def test_bounds(self, cache_store):
        service = SequenceService(
            repository=AsyncMock(spec=SequenceRepository),
            cache=ReadThroughCache(cache_store),
            max_page_size=20,
        )

        assert service.effective_page(0, 0) == (0, 0)
        assert service.effective_page(20, 5) == (20, 5)
        assert service.effective_page(21, 5) == (20, 5)
        assert service.effective_page(-1, -1) == (0, 0)
