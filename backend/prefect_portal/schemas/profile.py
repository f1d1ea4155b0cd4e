from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import List, Optional
from datetime import datetime

from prefect_portal.models.user import AppRole, Theme


class ProfileUpdate(BaseModel):
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    student_id: Optional[str] = Field(None, max_length=50)
    phone: Optional[str] = Field(None, max_length=20)
    department: Optional[str] = Field(None, max_length=100)
    year_level: Optional[int] = Field(None, ge=1, le=12)
    section: Optional[str] = Field(None, max_length=50)
    theme: Optional[Theme] = None


class AdminProfileUpdate(ProfileUpdate):
    email: Optional[EmailStr] = None
    is_active: Optional[bool] = None


class ThemeUpdate(BaseModel):
    theme: Theme


class ProfileSummary(BaseModel):
    """Compact user card for pickers and participant lists"""
    id: str
    first_name: str
    last_name: str
    email: str
    avatar_url: Optional[str] = None
    department: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class RoleChange(BaseModel):
    role: AppRole


class UserAdminResponse(ProfileSummary):
    student_id: Optional[str] = None
    is_active: bool
    roles: List[AppRole] = []
    created_at: datetime
    last_login: Optional[datetime] = None
