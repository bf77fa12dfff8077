"""
Steps API endpoints, nested under their sequence.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from ...schemas import CreateStepRequest, UpdateStepRequest, StepResponse
from ...services import StepService
from ..dependencies import get_step_service

router = APIRouter(prefix="/sequences/{sequence_id}/steps")


@router.post(
    "",
    response_model=StepResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_step(
    sequence_id: UUID,
    request: CreateStepRequest,
    service: StepService = Depends(get_step_service),
):
    """
    Append a step to a sequence.

    Returns 404 when the sequence does not exist.
    """
    return await service.create_step(sequence_id, request)


@router.patch(
    "/{step_id}",
    response_model=StepResponse,
    response_model_by_alias=True,
)
async def update_step(
    sequence_id: UUID,
    step_id: UUID,
    request: UpdateStepRequest,
    service: StepService = Depends(get_step_service),
):
    """Update subject, content or number of a step."""
    return await service.update_step(sequence_id, step_id, request)


@router.delete("/{step_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_step(
    sequence_id: UUID,
    step_id: UUID,
    service: StepService = Depends(get_step_service),
) -> Response:
    await service.delete_step(sequence_id, step_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
