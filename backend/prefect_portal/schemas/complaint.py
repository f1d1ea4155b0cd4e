from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

from prefect_portal.models.complaint import ComplaintStatus
from prefect_portal.schemas.common import UpdateBase


class ComplaintCreate(BaseModel):
    subject: str = Field(..., max_length=255)
    description: str
    status: Optional[ComplaintStatus] = None


class ComplaintUpdate(UpdateBase):
    subject: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    status: Optional[ComplaintStatus] = None
    assigned_to: Optional[str] = None


class ComplaintStatusUpdate(BaseModel):
    status: ComplaintStatus


class ComplaintResponse(BaseModel):
    id: str
    submitted_by: str
    subject: str
    description: str
    status: ComplaintStatus
    assigned_to: Optional[str] = None
    resolved_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ComplaintMessageCreate(BaseModel):
    message: str


class ComplaintMessageResponse(BaseModel):
    id: str
    complaint_id: str
    sender_id: str
    message: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
