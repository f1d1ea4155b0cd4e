from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal

from prefect_portal.models.recruitment import ApplicationStatus
from prefect_portal.schemas.common import UpdateBase


class ApplicationCreate(BaseModel):
    academic_year_id: str
    statement: str
    gpa: Optional[Decimal] = Field(None, description="0.00 to 4.00")


class ApplicationUpdate(UpdateBase):
    statement: Optional[str] = None
    gpa: Optional[Decimal] = None


class ApplicationReview(BaseModel):
    status: ApplicationStatus
    review_notes: Optional[str] = None


class ApplicationResponse(BaseModel):
    id: str
    applicant_id: str
    academic_year_id: str
    statement: str
    gpa: Optional[Decimal] = None
    status: ApplicationStatus
    reviewed_by: Optional[str] = None
    review_notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
