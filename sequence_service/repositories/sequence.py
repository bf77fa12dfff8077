"""
Sequence Repository

SQLAlchemy implementation of the sequence aggregate repository. Aggregate
creation is the only multi-statement transaction; every other write is a
single statement.
"""

from typing import List
from uuid import UUID

from sqlalchemy import select, update, delete
from sqlalchemy.orm import joinedload
import structlog

from ..constants import MAX_SQL_INTEGER, get_current_timestamp
from ..core.errors import SequenceNotFound, ValidationFailure
from ..models import Sequence
from .base import BaseRepository
from .interfaces import SequenceRepository

logger = structlog.get_logger()


class SqlAlchemySequenceRepository(BaseRepository, SequenceRepository):
    """Sequence aggregate persistence on the relational store."""

    async def create_aggregate(self, sequence: Sequence) -> Sequence:
        """
        Insert one sequence row and all of its step rows as a single unit.

        Args:
            sequence: Transient sequence with its steps attached

        Returns:
            The same object with id, external_id and created_at populated,
            and each step's identities populated

        Raises:
            ValidationFailure: If the sequence has no steps
            StorageFailure: If any insert or the commit fails; nothing is kept
        """
        if not sequence.steps:
            raise ValidationFailure("sequence steps are required", field="steps")

        async with self.transaction("create_aggregate", name=sequence.name) as session:
            session.add(sequence)
            # Sequence insert precedes step inserts; a step failure aborts both
            await session.flush()

        logger.info(
            "SequenceRepository: Aggregate created",
            sequence_id=str(sequence.external_id),
            step_count=len(sequence.steps),
        )

        return sequence

    async def find_aggregate_by_external_id(self, external_id: UUID) -> Sequence:
        """
        Load one sequence with its steps in a single round trip.

        Raises:
            SequenceNotFound: If no sequence has this external id
            StorageFailure: If the read fails
        """
        async with self.transaction(
            "find_aggregate_by_external_id", sequence_id=str(external_id)
        ) as session:
            stmt = (
                select(Sequence)
                .options(joinedload(Sequence.steps))
                .where(Sequence.external_id == external_id)
            )
            result = await session.execute(stmt)
            sequence = result.unique().scalar_one_or_none()

        if sequence is None:
            logger.debug(
                "SequenceRepository: Sequence not found", sequence_id=str(external_id)
            )
            raise SequenceNotFound(external_id)

        return sequence

    async def find_all_aggregates(self, limit: int, offset: int) -> List[Sequence]:
        """
        Load a page of sequences, oldest first, each with its steps.

        Args:
            limit: Maximum sequences to return (non-negative)
            offset: Sequences to skip (non-negative)

        Returns:
            List of sequences; empty when offset is past the last row

        Raises:
            ValidationFailure: If limit or offset is negative
            StorageFailure: If the read fails
        """
        if limit < 0:
            raise ValidationFailure("limit must be non-negative", field="limit")
        if offset < 0:
            raise ValidationFailure("offset must be non-negative", field="offset")
        if offset > MAX_SQL_INTEGER or limit > MAX_SQL_INTEGER:
            return []

        async with self.transaction(
            "find_all_aggregates", limit=limit, offset=offset
        ) as session:
            stmt = (
                select(Sequence)
                .options(joinedload(Sequence.steps))
                .order_by(Sequence.id)
                .limit(limit)
                .offset(offset)
            )
            result = await session.execute(stmt)
            sequences = list(result.unique().scalars().all())

        logger.debug(
            "SequenceRepository: Sequences listed",
            count=len(sequences),
            limit=limit,
            offset=offset,
        )

        return sequences

    async def update_aggregate(self, sequence: Sequence) -> Sequence:
        """
        Persist the tracking flags of a loaded sequence. Steps are untouched.

        Returns:
            The same object with updated_at set to the new timestamp

        Raises:
            SequenceNotFound: If the row no longer exists
            StorageFailure: If the update fails
        """
        updated_at = get_current_timestamp()

        async with self.transaction(
            "update_aggregate", sequence_id=str(sequence.external_id)
        ) as session:
            stmt = (
                update(Sequence)
                .where(Sequence.id == sequence.id)
                .values(
                    open_tracking_enabled=sequence.open_tracking_enabled,
                    click_tracking_enabled=sequence.click_tracking_enabled,
                    updated_at=updated_at,
                )
                .execution_options(synchronize_session=False)
            )
            result = await session.execute(stmt)
            affected = result.rowcount

        if affected == 0:
            logger.warning(
                "SequenceRepository: Sequence vanished before update",
                sequence_id=str(sequence.external_id),
            )
            raise SequenceNotFound(sequence.external_id)

        sequence.updated_at = updated_at

        logger.info(
            "SequenceRepository: Aggregate updated",
            sequence_id=str(sequence.external_id),
            open_tracking_enabled=sequence.open_tracking_enabled,
            click_tracking_enabled=sequence.click_tracking_enabled,
        )

        return sequence

    async def delete_aggregate(self, external_id: UUID) -> bool:
        """
        Delete a sequence row. Step rows are removed by the FK cascade.

        Returns:
            True if a row was deleted, False if none matched
        """
        async with self.transaction(
            "delete_aggregate", sequence_id=str(external_id)
        ) as session:
            stmt = (
                delete(Sequence)
                .where(Sequence.external_id == external_id)
                .execution_options(synchronize_session=False)
            )
            result = await session.execute(stmt)
            deleted = result.rowcount > 0

        logger.info(
            "SequenceRepository: Aggregate delete executed",
            sequence_id=str(external_id),
            deleted=deleted,
        )

        return deleted
