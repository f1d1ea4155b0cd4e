from sqlalchemy import Column, String, Date, DateTime, Time, Text, ForeignKey, UniqueConstraint, Index
from sqlalchemy.orm import relationship

from prefect_portal.core.database import Base
from prefect_portal.core.types import GUID, generate_uuid, utcnow


class Event(Base):
    __tablename__ = "events"

    __table_args__ = (
        Index('ix_events_event_date', 'event_date'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    event_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)
    location = Column(String(255), nullable=True)
    created_by = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    assignments = relationship("EventAssignment", back_populates="event", cascade="all, delete-orphan",
                               passive_deletes=True)

    def __repr__(self):
        return f"<Event {self.title} {self.event_date}>"


class EventAssignment(Base):
    """Prefect staffing for an event"""
    __tablename__ = "event_assignments"

    __table_args__ = (
        UniqueConstraint('event_id', 'prefect_id', name='uq_event_assignment'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    event_id = Column(GUID, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    prefect_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role_in_event = Column(String(100), nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    event = relationship("Event", back_populates="assignments")
