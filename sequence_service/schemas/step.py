"""
Step request and response schemas.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models import Step


class CreateStepRequest(BaseModel):
    """Schema for creating a step, alone or inside a new sequence."""

    model_config = ConfigDict(populate_by_name=True)

    mail_subject: str = Field(..., alias="mailSubject", min_length=1)
    mail_content: str = Field(..., alias="mailContent", min_length=1)
    step_number: Optional[int] = Field(None, alias="stepNumber", ge=1)


class UpdateStepRequest(BaseModel):
    """Schema for updating a step. Absent fields keep their stored value."""

    model_config = ConfigDict(populate_by_name=True)

    mail_subject: Optional[str] = Field(None, alias="mailSubject", min_length=1)
    mail_content: Optional[str] = Field(None, alias="mailContent", min_length=1)
    step_number: Optional[int] = Field(None, alias="stepNumber", ge=1)


class StepResponse(BaseModel):
    """Schema for reading a step."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    step_number: Optional[int] = Field(None, alias="stepNumber")
    mail_subject: str = Field(..., alias="mailSubject")
    mail_content: str = Field(..., alias="mailContent")

    @classmethod
    def from_model(cls, step: Step) -> "StepResponse":
        return cls(
            id=str(step.external_id),
            step_number=step.step_number,
            mail_subject=step.mail_subject,
            mail_content=step.mail_content,
        )
