"""
Repository Interfaces

Abstract contracts for the sequence aggregate and single-step persistence.
Services depend on these, so storage can be swapped for fakes in tests.
"""

from abc import ABC, abstractmethod
from typing import List
from uuid import UUID

from ..models import Sequence, Step


class SequenceRepository(ABC):
    """
    Abstract repository for the sequence aggregate (sequence row + step rows).

    Raises:
        SequenceNotFound: when the addressed sequence does not exist
        StorageFailure: when the durable store rejects the operation
    """

    @abstractmethod
    async def create_aggregate(self, sequence: Sequence) -> Sequence:
        """Insert the sequence and all of its steps atomically."""
        pass

    @abstractmethod
    async def find_aggregate_by_external_id(self, external_id: UUID) -> Sequence:
        """Load one sequence with its steps embedded."""
        pass

    @abstractmethod
    async def find_all_aggregates(self, limit: int, offset: int) -> List[Sequence]:
        """Load a page of sequences in creation order."""
        pass

    @abstractmethod
    async def update_aggregate(self, sequence: Sequence) -> Sequence:
        """Persist the tracking flags and stamp a new last-updated time."""
        pass

    @abstractmethod
    async def delete_aggregate(self, external_id: UUID) -> bool:
        """Delete a sequence; its steps go with it through the FK cascade."""
        pass


class StepRepository(ABC):
    """
    Abstract repository for single-step operations.

    Raises:
        StepNotFound: when the addressed step does not exist under its parent
        StorageFailure: when the durable store rejects the operation
    """

    @abstractmethod
    async def create_step(self, step: Step) -> Step:
        """Append one step to an existing sequence."""
        pass

    @abstractmethod
    async def update_step(self, step: Step) -> Step:
        """Persist subject, content and step number of one step."""
        pass

    @abstractmethod
    async def delete_step(self, sequence_id: UUID, step_id: UUID) -> bool:
        """Delete one step addressed through its parent sequence."""
        pass

    @abstractmethod
    async def find_step(self, sequence_id: UUID, step_id: UUID) -> Step:
        """Load one step, scoped by both its own and its parent's identifier."""
        pass
