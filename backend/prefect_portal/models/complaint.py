from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
import enum

from prefect_portal.core.database import Base
from prefect_portal.core.types import GUID, generate_uuid, utcnow, enum_column_type


class ComplaintStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"


class Complaint(Base):
    __tablename__ = "complaints"

    __table_args__ = (
        Index('ix_complaints_status', 'status'),
        Index('ix_complaints_created_at', 'created_at'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    submitted_by = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    subject = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    status = Column(enum_column_type(ComplaintStatus), default=ComplaintStatus.PENDING, nullable=False)
    assigned_to = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    resolved_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    messages = relationship("ComplaintMessage", back_populates="complaint", cascade="all, delete-orphan",
                            passive_deletes=True)

    def __repr__(self):
        return f"<Complaint {self.subject} ({self.status})>"


class ComplaintMessage(Base):
    """Follow-up thread on a complaint"""
    __tablename__ = "complaint_messages"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    complaint_id = Column(GUID, ForeignKey("complaints.id", ondelete="CASCADE"), nullable=False, index=True)
    sender_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    complaint = relationship("Complaint", back_populates="messages")
