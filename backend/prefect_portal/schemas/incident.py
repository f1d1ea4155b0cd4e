from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

from prefect_portal.models.incident import IncidentSeverity
from prefect_portal.schemas.common import UpdateBase


class IncidentCreate(BaseModel):
    title: str = Field(..., max_length=255)
    description: str
    severity: IncidentSeverity = IncidentSeverity.LOW
    location: Optional[str] = Field(None, max_length=255)
    incident_date: Optional[datetime] = None


class IncidentUpdate(UpdateBase):
    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    severity: Optional[IncidentSeverity] = None
    location: Optional[str] = Field(None, max_length=255)
    incident_date: Optional[datetime] = None
    is_resolved: Optional[bool] = None


class IncidentResponse(BaseModel):
    id: str
    reported_by: str
    title: str
    description: str
    severity: IncidentSeverity
    location: Optional[str] = None
    incident_date: datetime
    is_resolved: bool
    resolved_by: Optional[str] = None
    resolved_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
