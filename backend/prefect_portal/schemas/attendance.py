from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
import datetime as dt

from prefect_portal.models.attendance import AttendanceStatus
from prefect_portal.schemas.common import UpdateBase


class AttendanceCreate(BaseModel):
    prefect_id: Optional[str] = Field(None, description="Defaults to the caller")
    date: dt.date
    time_in: Optional[dt.datetime] = None
    time_out: Optional[dt.datetime] = None
    status: AttendanceStatus = AttendanceStatus.PRESENT
    notes: Optional[str] = None


class AttendanceUpdate(UpdateBase):
    date: Optional[dt.date] = None
    time_in: Optional[dt.datetime] = None
    time_out: Optional[dt.datetime] = None
    status: Optional[AttendanceStatus] = None
    notes: Optional[str] = None


class AttendanceStatusUpdate(BaseModel):
    status: AttendanceStatus


class AttendanceResponse(BaseModel):
    id: str
    prefect_id: str
    date: dt.date
    time_in: Optional[dt.datetime] = None
    time_out: Optional[dt.datetime] = None
    status: AttendanceStatus
    notes: Optional[str] = None
    created_at: dt.datetime
    updated_at: dt.datetime

    model_config = ConfigDict(from_attributes=True)
