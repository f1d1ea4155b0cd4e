"""Pydantic schemas for conversations and messages"""
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime

from prefect_portal.models.conversation import ConversationType
from prefect_portal.schemas.common import UpdateBase


class ConversationCreate(BaseModel):
    title: str = Field(..., max_length=255)
    description: Optional[str] = None
    type: ConversationType = ConversationType.GROUP
    participant_ids: List[str] = Field(default_factory=list)


class ConversationUpdate(UpdateBase):
    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    is_active: Optional[bool] = None


class DirectConversationRequest(BaseModel):
    other_user_id: str
    type: ConversationType


class ParticipantAdd(BaseModel):
    participant_id: str


class ParticipantResponse(BaseModel):
    id: str
    conversation_id: str
    participant_id: str
    joined_at: datetime
    last_read_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class MessageCreate(BaseModel):
    message: str
    attachment_url: Optional[str] = None


class MessageUpdate(BaseModel):
    message: str


class MessageResponse(BaseModel):
    id: str
    conversation_id: str
    sender_id: str
    message: str
    attachment_url: Optional[str] = None
    is_edited: bool = False
    edited_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ConversationResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    type: ConversationType
    created_by: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
    participants: List[ParticipantResponse] = []

    model_config = ConfigDict(from_attributes=True)


class ConversationSummaryResponse(ConversationResponse):
    latest_message: Optional[MessageResponse] = None
