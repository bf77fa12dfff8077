"""
Wire schemas (camelCase JSON) for sequences and steps.
"""

from .sequence import (
    CreateSequenceRequest,
    UpdateSequenceRequest,
    SequenceResponse,
    serialize_sequence,
    serialize_sequences,
)
from .step import CreateStepRequest, UpdateStepRequest, StepResponse

__all__ = [
    "CreateSequenceRequest",
    "UpdateSequenceRequest",
    "SequenceResponse",
    "CreateStepRequest",
    "UpdateStepRequest",
    "StepResponse",
    "serialize_sequence",
    "serialize_sequences",
]
