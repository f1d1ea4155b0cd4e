from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import date, datetime, time

from prefect_portal.models.duty import DutyStatus
from prefect_portal.schemas.common import UpdateBase


class DutyCreate(BaseModel):
    prefect_ids: List[str] = Field(default_factory=list, description="One assignment is created per prefect")
    title: str = Field(..., max_length=255)
    description: Optional[str] = None
    duty_date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    location: Optional[str] = Field(None, max_length=255)
    status: DutyStatus = DutyStatus.ASSIGNED


class DutyUpdate(UpdateBase):
    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    duty_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    location: Optional[str] = Field(None, max_length=255)
    status: Optional[DutyStatus] = None


class DutyStatusUpdate(BaseModel):
    status: DutyStatus


class DutyResponse(BaseModel):
    id: str
    prefect_id: str
    title: str
    description: Optional[str] = None
    duty_date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    location: Optional[str] = None
    status: DutyStatus
    assigned_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DutyReportCreate(BaseModel):
    report: str
    issues_encountered: Optional[str] = None


class DutyReportResponse(BaseModel):
    id: str
    assignment_id: str
    prefect_id: str
    report: str
    issues_encountered: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
