"""
Sequences API endpoints.

Reads return the cached JSON bytes as-is so a hit and a miss produce the
same body. Writes go through SequenceService, which invalidates after commit.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from ...constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE
from ...schemas import CreateSequenceRequest, UpdateSequenceRequest, SequenceResponse
from ...services import SequenceService
from ..dependencies import get_sequence_service, parse_int

router = APIRouter(prefix="/sequences")

JSON_MEDIA_TYPE = "application/json"


@router.get("")
async def list_sequences(
    size: Optional[str] = Query(None, description="Page size"),
    page: Optional[str] = Query(None, description="Zero-based page index"),
    service: SequenceService = Depends(get_sequence_service),
) -> Response:
    """
    List sequences with their steps.

    Malformed size/page values fall back to the defaults; size is capped at
    MAX_SEQUENCE_PAGINATION.
    """
    body = await service.list_sequences(
        parse_int(size, DEFAULT_PAGE_SIZE),
        parse_int(page, DEFAULT_PAGE),
    )
    return Response(content=body, media_type=JSON_MEDIA_TYPE)


@router.get("/{sequence_id}")
async def get_sequence(
    sequence_id: UUID,
    service: SequenceService = Depends(get_sequence_service),
) -> Response:
    """Get one sequence with its steps."""
    body = await service.get_sequence(sequence_id)
    return Response(content=body, media_type=JSON_MEDIA_TYPE)


@router.post(
    "",
    response_model=SequenceResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_sequence(
    request: CreateSequenceRequest,
    service: SequenceService = Depends(get_sequence_service),
):
    """
    Create a sequence together with its steps.

    Args:
        request: Sequence name, tracking flags and at least one step

    Returns:
        The created sequence
    """
    return await service.create_sequence(request)


@router.patch(
    "/{sequence_id}",
    response_model=SequenceResponse,
    response_model_by_alias=True,
)
async def update_sequence(
    sequence_id: UUID,
    request: UpdateSequenceRequest,
    service: SequenceService = Depends(get_sequence_service),
):
    """Update the tracking flags of a sequence."""
    return await service.update_sequence(sequence_id, request)


@router.delete("/{sequence_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_sequence(
    sequence_id: UUID,
    service: SequenceService = Depends(get_sequence_service),
) -> Response:
    """Delete a sequence and all of its steps."""
    await service.delete_sequence(sequence_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
