"""
Sequence request and response schemas, and the canonical JSON encoding.

Both the cache and the HTTP responses use ``serialize_sequence`` and
``serialize_sequences`` so a cache hit is byte-identical to the miss that
populated it.
"""

from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter

from ..constants import format_timestamp
from ..models import Sequence
from .step import CreateStepRequest, StepResponse


class CreateSequenceRequest(BaseModel):
    """Schema for creating a sequence with its initial steps."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        validation_alias=AliasChoices("name", "Name"),
    )
    open_tracking_enabled: bool = Field(False, alias="openTrackingEnabled")
    click_tracking_enabled: bool = Field(False, alias="clickTrackingEnabled")
    steps: List[CreateStepRequest] = Field(..., min_length=1)


class UpdateSequenceRequest(BaseModel):
    """Schema for updating the tracking flags of a sequence."""

    model_config = ConfigDict(populate_by_name=True)

    open_tracking_enabled: Optional[bool] = Field(None, alias="openTrackingEnabled")
    click_tracking_enabled: Optional[bool] = Field(None, alias="clickTrackingEnabled")


class SequenceResponse(BaseModel):
    """Schema for reading a sequence."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    open_tracking_enabled: bool = Field(..., alias="openTrackingEnabled")
    click_tracking_enabled: bool = Field(..., alias="clickTrackingEnabled")
    steps: List[StepResponse]
    created_at: str = Field(..., alias="createdAt")
    last_updated_at: Optional[str] = Field(None, alias="lastUpdatedAt")

    @classmethod
    def from_model(cls, sequence: Sequence) -> "SequenceResponse":
        return cls(
            id=str(sequence.external_id),
            name=sequence.name,
            open_tracking_enabled=sequence.open_tracking_enabled,
            click_tracking_enabled=sequence.click_tracking_enabled,
            steps=[StepResponse.from_model(step) for step in sequence.steps],
            created_at=format_timestamp(sequence.created_at),
            last_updated_at=(
                format_timestamp(sequence.updated_at) if sequence.updated_at else None
            ),
        )


_sequence_list_adapter = TypeAdapter(List[SequenceResponse])


def serialize_sequence(response: SequenceResponse) -> bytes:
    return response.model_dump_json(by_alias=True).encode("utf-8")


def serialize_sequences(responses: List[SequenceResponse]) -> bytes:
    return _sequence_list_adapter.dump_json(responses, by_alias=True)
