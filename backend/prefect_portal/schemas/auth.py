from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator
from typing import Optional, List
from datetime import datetime

from prefect_portal.models.user import AppRole, Theme


class UserRegister(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    confirm_password: Optional[str] = None
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)

    @model_validator(mode='after')
    def passwords_match(self):
        if self.confirm_password is not None and self.confirm_password != self.password:
            raise ValueError("Passwords do not match")
        return self


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)


class RefreshRequest(BaseModel):
    refresh_token: str


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    student_id: Optional[str] = None
    phone: Optional[str] = None
    department: Optional[str] = None
    year_level: Optional[int] = None
    section: Optional[str] = None
    avatar_url: Optional[str] = None
    theme: Theme = Theme.SYSTEM
    is_active: bool
    roles: List[AppRole] = []
    created_at: datetime
    updated_at: datetime
    last_login: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SessionResponse(BaseModel):
    """Who is signed in: user, role set and theme"""
    user: UserResponse
    roles: List[AppRole]
    primary_role: Optional[AppRole] = None
    theme: Theme


class AuthResponse(Token):
    session: SessionResponse
