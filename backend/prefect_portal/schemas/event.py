from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import date, datetime, time

from prefect_portal.schemas.common import UpdateBase


class EventCreate(BaseModel):
    title: str = Field(..., max_length=255)
    description: Optional[str] = None
    event_date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    location: Optional[str] = Field(None, max_length=255)


class EventUpdate(UpdateBase):
    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    event_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    location: Optional[str] = Field(None, max_length=255)


class EventResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    event_date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    location: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class EventAssign(BaseModel):
    prefect_ids: List[str]
    role_in_event: Optional[str] = Field(None, max_length=100)


class EventAssignmentResponse(BaseModel):
    id: str
    event_id: str
    prefect_id: str
    role_in_event: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class EventStats(BaseModel):
    total: int
    upcoming: int
