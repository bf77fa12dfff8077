"""
Application services: cache-aside orchestration over the repositories.
"""

from .read_through import ReadThroughCache
from .sequences import SequenceService
from .steps import StepService

__all__ = [
    "ReadThroughCache",
    "SequenceService",
    "StepService",
]
