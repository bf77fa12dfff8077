"""
Step Repository

SQLAlchemy implementation of single-step operations. Every lookup and delete
is scoped through the parent sequence so a step cannot be addressed through
the wrong parent.
"""

from uuid import UUID

from sqlalchemy import select, update, delete
import structlog

from ..core.errors import StepNotFound
from ..models import Sequence, Step
from .base import BaseRepository
from .interfaces import StepRepository

logger = structlog.get_logger()


class SqlAlchemyStepRepository(BaseRepository, StepRepository):
    """Step persistence on the relational store."""

    async def create_step(self, step: Step) -> Step:
        """
        Insert one step under an existing sequence.

        Args:
            step: Transient step with sequence_id set to the parent's internal id

        Returns:
            The same object with id and external_id populated

        Raises:
            StorageFailure: If the insert fails (e.g. parent deleted meanwhile)
        """
        if step.sequence_id is None:
            raise ValueError("Step must have sequence_id set (cannot be None)")

        async with self.transaction("create_step", parent_id=step.sequence_id) as session:
            session.add(step)
            await session.flush()

        logger.info(
            "StepRepository: Step created",
            step_id=str(step.external_id),
            parent_id=step.sequence_id,
        )

        return step

    async def update_step(self, step: Step) -> Step:
        """
        Persist subject, content and step number of one step.

        Raises:
            StepNotFound: If the step no longer exists
            StorageFailure: If the update fails
        """
        async with self.transaction(
            "update_step", step_id=str(step.external_id)
        ) as session:
            stmt = (
                update(Step)
                .where(Step.external_id == step.external_id)
                .values(
                    mail_subject=step.mail_subject,
                    mail_content=step.mail_content,
                    step_number=step.step_number,
                )
                .execution_options(synchronize_session=False)
            )
            result = await session.execute(stmt)
            affected = result.rowcount

        if affected == 0:
            raise StepNotFound(step.external_id)

        logger.info("StepRepository: Step updated", step_id=str(step.external_id))

        return step

    async def delete_step(self, sequence_id: UUID, step_id: UUID) -> bool:
        """
        Delete one step addressed through its parent sequence.

        Returns:
            True if a row was deleted, False if the pairing did not match
        """
        parent_id = (
            select(Sequence.id)
            .where(Sequence.external_id == sequence_id)
            .scalar_subquery()
        )

        async with self.transaction(
            "delete_step", sequence_id=str(sequence_id), step_id=str(step_id)
        ) as session:
            stmt = (
                delete(Step)
                .where(Step.external_id == step_id, Step.sequence_id == parent_id)
                .execution_options(synchronize_session=False)
            )
            result = await session.execute(stmt)
            deleted = result.rowcount > 0

        logger.info(
            "StepRepository: Step delete executed",
            sequence_id=str(sequence_id),
            step_id=str(step_id),
            deleted=deleted,
        )

        return deleted

    async def find_step(self, sequence_id: UUID, step_id: UUID) -> Step:
        """
        Load one step by its own and its parent's external identifiers.

        Raises:
            StepNotFound: If either id does not resolve to the expected pairing
            StorageFailure: If the read fails
        """
        async with self.transaction(
            "find_step", sequence_id=str(sequence_id), step_id=str(step_id)
        ) as session:
            stmt = (
                select(Step)
                .join(Step.sequence)
                .where(Step.external_id == step_id, Sequence.external_id == sequence_id)
            )
            result = await session.execute(stmt)
            step = result.scalar_one_or_none()

        if step is None:
            logger.debug(
                "StepRepository: Step not found",
                sequence_id=str(sequence_id),
                step_id=str(step_id),
            )
            raise StepNotFound(step_id, sequence_id)

        return step
