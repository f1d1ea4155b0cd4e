"""Shared response shapes"""
from pydantic import BaseModel
from typing import Dict, List, Optional
from datetime import datetime


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class CountsResponse(BaseModel):
    counts: Dict[str, int]


class NavEntryResponse(BaseModel):
    key: str
    title: str
    path: str
    roles: List[str]


class NavigationResponse(BaseModel):
    entries: List[NavEntryResponse]
    primary_role: Optional[str] = None
    variants: Dict[str, str]


class UpdateBase(BaseModel):
    """Fields every update payload may carry"""
    # When set, the write only applies if the stored updated_at still matches
    expected_updated_at: Optional[datetime] = None


class StatusCounts(BaseModel):
    total: int = 0
    counts: Dict[str, int] = {}
