"""Conversation aggregate: header, participants, ordered messages"""
from sqlalchemy import Column, String, Boolean, DateTime, Text, ForeignKey, UniqueConstraint, Index
from sqlalchemy.orm import relationship
import enum

from prefect_portal.core.database import Base
from prefect_portal.core.types import GUID, generate_uuid, utcnow, enum_column_type


class ConversationType(str, enum.Enum):
    STUDENT_FACULTY = "student_faculty"
    STUDENT_PREFECT = "student_prefect"
    STUDENT_ADMIN = "student_admin"
    GROUP = "group"


class Conversation(Base):
    __tablename__ = "conversations"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(enum_column_type(ConversationType), default=ConversationType.GROUP, nullable=False)
    created_by = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    participants = relationship("ConversationParticipant", back_populates="conversation",
                                cascade="all, delete-orphan", passive_deletes=True, lazy="selectin")
    messages = relationship("ConversationMessage", back_populates="conversation",
                            cascade="all, delete-orphan", passive_deletes=True)

    @property
    def participant_ids(self) -> set:
        return {p.participant_id for p in self.participants}

    def __repr__(self):
        return f"<Conversation {self.title} ({self.type})>"


class ConversationParticipant(Base):
    __tablename__ = "conversation_participants"

    __table_args__ = (
        UniqueConstraint('conversation_id', 'participant_id', name='uq_conversation_participant'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    conversation_id = Column(GUID, ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False, index=True)
    participant_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    joined_at = Column(DateTime, default=utcnow, nullable=False)
    last_read_at = Column(DateTime, nullable=True)

    conversation = relationship("Conversation", back_populates="participants")


class ConversationMessage(Base):
    __tablename__ = "conversation_messages"

    __table_args__ = (
        Index('ix_conversation_messages_conv_created', 'conversation_id', 'created_at'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    conversation_id = Column(GUID, ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False)
    sender_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    message = Column(Text, nullable=False)
    attachment_url = Column(Text, nullable=True)
    is_edited = Column(Boolean, default=False, nullable=False)
    edited_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    conversation = relationship("Conversation", back_populates="messages")

    def __repr__(self):
        return f"<ConversationMessage {self.id} in {self.conversation_id}>"
