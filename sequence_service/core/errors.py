"""
Sequence Service Exceptions

Domain-specific exceptions for sequence and step operations.
The API layer maps each family to one HTTP status class:
ValidationFailure -> 400, NotFound -> 404, StorageFailure -> 500.
"""

from typing import Optional, Any, Dict
from uuid import UUID


class SequenceServiceError(Exception):
    """Base exception for sequence service errors.

    Never swallow these - always preserve context.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationFailure(SequenceServiceError):
    """Raised when input is malformed or violates a creation rule."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {}
        if field:
            details["field"] = field

        super().__init__(
            message=message, error_code="VALIDATION_FAILURE", details=details
        )


class NotFound(SequenceServiceError):
    """Raised when no row matches the requested identifier."""


class SequenceNotFound(NotFound):
    """Raised when a sequence does not exist."""

    def __init__(self, external_id: UUID):
        super().__init__(
            message="sequence not found",
            error_code="SEQUENCE_NOT_FOUND",
            details={"sequence_id": str(external_id)},
        )


class StepNotFound(NotFound):
    """Raised when a step does not exist under the given sequence."""

    def __init__(self, step_id: UUID, sequence_id: Optional[UUID] = None):
        details = {"step_id": str(step_id)}
        if sequence_id:
            details["sequence_id"] = str(sequence_id)

        super().__init__(
            message="step not found", error_code="STEP_NOT_FOUND", details=details
        )


class StorageFailure(SequenceServiceError):
    """Raised when the durable store rejects an operation.

    Covers constraint violations, connection loss and failed commits.
    The original driver error is chained as __cause__.
    """

    def __init__(
        self,
        operation: str,
        original_error: Optional[BaseException] = None,
    ):
        details = {"operation": operation}
        if original_error:
            details["original_error_type"] = type(original_error).__name__

        super().__init__(
            message=f"Storage operation '{operation}' failed",
            error_code="STORAGE_FAILURE",
            details=details,
        )
        if original_error:
            self.__cause__ = original_error
