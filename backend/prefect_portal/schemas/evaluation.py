from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

from prefect_portal.schemas.common import UpdateBase


class EvaluationCreate(BaseModel):
    prefect_id: str
    academic_year_id: Optional[str] = None
    rating: int
    comments: Optional[str] = None


class EvaluationUpdate(UpdateBase):
    academic_year_id: Optional[str] = None
    rating: Optional[int] = None
    comments: Optional[str] = None


class EvaluationResponse(BaseModel):
    id: str
    prefect_id: str
    evaluator_id: str
    academic_year_id: Optional[str] = None
    rating: int
    comments: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class EvaluationStats(BaseModel):
    total: int
    average: float
    excellent: int
    good: int
    average_count: int
    poor: int
