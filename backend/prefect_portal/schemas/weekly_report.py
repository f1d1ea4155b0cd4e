from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import date, datetime

from prefect_portal.schemas.common import UpdateBase


class WeeklyReportCreate(BaseModel):
    prefect_id: Optional[str] = Field(None, description="Defaults to the caller")
    week_start: date
    week_end: date
    summary: str
    achievements: Optional[str] = None
    challenges: Optional[str] = None


class WeeklyReportUpdate(UpdateBase):
    week_start: Optional[date] = None
    week_end: Optional[date] = None
    summary: Optional[str] = None
    achievements: Optional[str] = None
    challenges: Optional[str] = None


class WeeklyReportResponse(BaseModel):
    id: str
    prefect_id: str
    week_start: date
    week_end: date
    summary: str
    achievements: Optional[str] = None
    challenges: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
