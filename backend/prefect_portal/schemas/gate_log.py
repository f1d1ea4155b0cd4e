from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import date, datetime, time

from prefect_portal.schemas.common import UpdateBase


class GateLogCreate(BaseModel):
    prefect_id: Optional[str] = Field(None, description="Defaults to the caller")
    log_date: date
    time_in: time
    time_out: Optional[time] = None
    notes: Optional[str] = None


class GateLogUpdate(UpdateBase):
    log_date: Optional[date] = None
    time_in: Optional[time] = None
    time_out: Optional[time] = None
    notes: Optional[str] = None


class GateLogResponse(BaseModel):
    id: str
    prefect_id: str
    log_date: date
    time_in: time
    time_out: Optional[time] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class GateLogStats(BaseModel):
    total: int
    today: int
