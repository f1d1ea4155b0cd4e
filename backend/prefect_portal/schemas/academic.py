from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

from prefect_portal.schemas.common import UpdateBase


class AcademicYearCreate(BaseModel):
    year_start: int = Field(..., ge=2000, le=2100)
    year_end: int = Field(..., ge=2000, le=2100)
    semester: str = Field(..., max_length=50)
    is_current: bool = False


class AcademicYearUpdate(UpdateBase):
    year_start: Optional[int] = Field(None, ge=2000, le=2100)
    year_end: Optional[int] = Field(None, ge=2000, le=2100)
    semester: Optional[str] = Field(None, max_length=50)
    is_current: Optional[bool] = None


class AcademicYearResponse(BaseModel):
    id: str
    year_start: int
    year_end: int
    semester: str
    is_current: bool
    label: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DepartmentCreate(BaseModel):
    name: str = Field(..., max_length=150)
    code: str = Field(..., max_length=20)
    description: Optional[str] = None


class DepartmentUpdate(UpdateBase):
    name: Optional[str] = Field(None, max_length=150)
    code: Optional[str] = Field(None, max_length=20)
    description: Optional[str] = None


class DepartmentResponse(BaseModel):
    id: str
    name: str
    code: str
    description: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
