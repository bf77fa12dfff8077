"""
Sequence Service

Per-operation cache policy for sequences:
- list and detail reads go through the read-through cache
- create, update and delete clear the whole cache after commit, since any
  list page may hold a stale snapshot
"""

from typing import List, Tuple
from uuid import UUID

import structlog

from ..cache import CacheKey
from ..core.errors import SequenceNotFound, ValidationFailure
from ..models import Sequence, Step
from ..repositories import SequenceRepository
from ..schemas import (
    CreateSequenceRequest,
    UpdateSequenceRequest,
    SequenceResponse,
    serialize_sequence,
    serialize_sequences,
)
from .read_through import ReadThroughCache

logger = structlog.get_logger()


class SequenceService:
    """Sequence reads and top-level writes with cache-aside."""

    def __init__(
        self,
        repository: SequenceRepository,
        cache: ReadThroughCache,
        max_page_size: int,
    ):
        self.repository = repository
        self.cache = cache
        self.max_page_size = max_page_size

    def effective_page(self, size: int, page: int) -> Tuple[int, int]:
        """Clamp the requested size to [0, max_page_size] and page to >= 0."""
        return max(0, min(size, self.max_page_size)), max(0, page)

    async def list_sequences(self, size: int, page: int) -> bytes:
        """
        Return one serialized page of sequences.

        Args:
            size: Requested page size (clamped to the configured maximum)
            page: Zero-based page index

        Returns:
            JSON array bytes, served from cache when present
        """
        size, page = self.effective_page(size, page)
        key = CacheKey.sequences_page(size, page)

        async def load() -> bytes:
            sequences = await self.repository.find_all_aggregates(
                limit=size, offset=size * page
            )
            return serialize_sequences(
                [SequenceResponse.from_model(sequence) for sequence in sequences]
            )

        return await self.cache.fetch(key, load)

    async def get_sequence(self, external_id: UUID) -> bytes:
        """
        Return one serialized sequence.

        Raises:
            SequenceNotFound: If it does not exist (nothing is cached)
        """
        key = CacheKey.sequence(external_id)

        async def load() -> bytes:
            sequence = await self.repository.find_aggregate_by_external_id(external_id)
            return serialize_sequence(SequenceResponse.from_model(sequence))

        return await self.cache.fetch(key, load)

    async def create_sequence(self, request: CreateSequenceRequest) -> SequenceResponse:
        """
        Create a sequence and its steps atomically.

        Raises:
            ValidationFailure: If two steps share a step number
            StorageFailure: If the transaction fails
        """
        self._ensure_unique_step_numbers(request)

        sequence = Sequence(
            name=request.name,
            open_tracking_enabled=request.open_tracking_enabled,
            click_tracking_enabled=request.click_tracking_enabled,
            steps=[
                Step(
                    mail_subject=step.mail_subject,
                    mail_content=step.mail_content,
                    step_number=step.step_number,
                )
                for step in request.steps
            ],
        )

        await self.repository.create_aggregate(sequence)
        self.cache.invalidate_all()

        logger.info(
            "Sequence created",
            sequence_id=str(sequence.external_id),
            step_count=len(sequence.steps),
        )

        return SequenceResponse.from_model(sequence)

    async def update_sequence(
        self, external_id: UUID, request: UpdateSequenceRequest
    ) -> SequenceResponse:
        """
        Apply the provided tracking flags and stamp the update time.

        Raises:
            SequenceNotFound: If the sequence does not exist
            StorageFailure: If the read or update fails
        """
        sequence = await self.repository.find_aggregate_by_external_id(external_id)

        if request.open_tracking_enabled is not None:
            sequence.open_tracking_enabled = request.open_tracking_enabled
        if request.click_tracking_enabled is not None:
            sequence.click_tracking_enabled = request.click_tracking_enabled

        await self.repository.update_aggregate(sequence)
        self.cache.invalidate_all()

        return SequenceResponse.from_model(sequence)

    async def delete_sequence(self, external_id: UUID) -> None:
        """
        Delete a sequence and, through the FK cascade, its steps.

        Raises:
            SequenceNotFound: If nothing was deleted
        """
        deleted = await self.repository.delete_aggregate(external_id)
        if not deleted:
            raise SequenceNotFound(external_id)

        self.cache.invalidate_all()

    @staticmethod
    def _ensure_unique_step_numbers(request: CreateSequenceRequest) -> None:
        seen: List[int] = []
        for step in request.steps:
            if step.step_number is None:
                continue
            if step.step_number in seen:
                raise ValidationFailure(
                    f"step number {step.step_number} is used more than once",
                    field="steps",
                )
            seen.append(step.step_number)
