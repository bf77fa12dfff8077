"""
Step Service

Single-step writes. Each successful write evicts only the parent's detail
key; list pages are left to expire.
"""

from uuid import UUID

import structlog

from ..cache import CacheKey
from ..models import Step
from ..repositories import SequenceRepository, StepRepository
from ..schemas import CreateStepRequest, UpdateStepRequest, StepResponse
from .read_through import ReadThroughCache

logger = structlog.get_logger()


class StepService:
    """Step create/update/delete with targeted cache invalidation."""

    def __init__(
        self,
        sequence_repository: SequenceRepository,
        step_repository: StepRepository,
        cache: ReadThroughCache,
    ):
        self.sequence_repository = sequence_repository
        self.step_repository = step_repository
        self.cache = cache

    async def create_step(
        self, sequence_id: UUID, request: CreateStepRequest
    ) -> StepResponse:
        """
        Append a step to an existing sequence.

        Raises:
            SequenceNotFound: If the parent sequence does not exist
            StorageFailure: If the read or insert fails
        """
        sequence = await self.sequence_repository.find_aggregate_by_external_id(
            sequence_id
        )

        step = Step(
            sequence_id=sequence.id,
            mail_subject=request.mail_subject,
            mail_content=request.mail_content,
            step_number=request.step_number,
        )

        await self.step_repository.create_step(step)
        self.cache.invalidate(CacheKey.sequence(sequence_id))

        return StepResponse.from_model(step)

    async def update_step(
        self, sequence_id: UUID, step_id: UUID, request: UpdateStepRequest
    ) -> StepResponse:
        """
        Apply the provided fields to one step.

        Raises:
            StepNotFound: If the step does not exist under this sequence
            StorageFailure: If the read or update fails
        """
        step = await self.step_repository.find_step(sequence_id, step_id)

        if request.mail_subject is not None:
            step.mail_subject = request.mail_subject
        if request.mail_content is not None:
            step.mail_content = request.mail_content
        if request.step_number is not None:
            step.step_number = request.step_number

        await self.step_repository.update_step(step)
        self.cache.invalidate(CacheKey.sequence(sequence_id))

        return StepResponse.from_model(step)

    async def delete_step(self, sequence_id: UUID, step_id: UUID) -> None:
        """
        Delete one step. Deleting an absent step is not an error.

        Raises:
            StorageFailure: If the delete fails
        """
        deleted = await self.step_repository.delete_step(sequence_id, step_id)
        self.cache.invalidate(CacheKey.sequence(sequence_id))

        if not deleted:
            logger.info(
                "Step delete matched no row",
                sequence_id=str(sequence_id),
                step_id=str(step_id),
            )
