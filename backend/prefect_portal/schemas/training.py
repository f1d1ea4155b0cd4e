from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

from prefect_portal.schemas.common import UpdateBase


class CategoryCreate(BaseModel):
    name: str = Field(..., max_length=150)
    description: Optional[str] = None


class CategoryUpdate(UpdateBase):
    name: Optional[str] = Field(None, max_length=150)
    description: Optional[str] = None


class CategoryResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    created_at: datetime
    material_count: int = 0

    model_config = ConfigDict(from_attributes=True)


class MaterialCreate(BaseModel):
    category_id: str
    title: str = Field(..., max_length=255)
    content: Optional[str] = None
    file_url: Optional[str] = None
    is_published: bool = False


class MaterialUpdate(UpdateBase):
    category_id: Optional[str] = None
    title: Optional[str] = Field(None, max_length=255)
    content: Optional[str] = None
    file_url: Optional[str] = None
    is_published: Optional[bool] = None


class MaterialResponse(BaseModel):
    id: str
    category_id: str
    title: str
    content: Optional[str] = None
    file_url: Optional[str] = None
    created_by: Optional[str] = None
    is_published: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MaterialStats(BaseModel):
    total: int
    published: int
    draft: int
