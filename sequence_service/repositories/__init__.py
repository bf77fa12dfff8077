"""
Repository Pattern Implementation

All durable reads and writes of sequences and steps go through these
repositories; nothing else touches the relational store.
"""

from .base import BaseRepository
from .interfaces import SequenceRepository, StepRepository
from .sequence import SqlAlchemySequenceRepository
from .step import SqlAlchemyStepRepository

__all__ = [
    "BaseRepository",
    "SequenceRepository",
    "StepRepository",
    "SqlAlchemySequenceRepository",
    "SqlAlchemyStepRepository",
]
