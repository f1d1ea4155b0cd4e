from sqlalchemy import Column, String, Date, DateTime, Time, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
import enum

from prefect_portal.core.database import Base
from prefect_portal.core.types import GUID, generate_uuid, utcnow, enum_column_type


class DutyStatus(str, enum.Enum):
    ASSIGNED = "assigned"
    COMPLETED = "completed"
    MISSED = "missed"


class DutyAssignment(Base):
    """One duty for one prefect; multi-prefect duties are stored as one row each"""
    __tablename__ = "duty_assignments"

    __table_args__ = (
        Index('ix_duty_assignments_duty_date', 'duty_date'),
        Index('ix_duty_assignments_status', 'status'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    prefect_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    duty_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)
    location = Column(String(255), nullable=True)
    status = Column(enum_column_type(DutyStatus), default=DutyStatus.ASSIGNED, nullable=False)
    assigned_by = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    reports = relationship("DutyReport", back_populates="assignment", cascade="all, delete-orphan",
                           passive_deletes=True)

    def __repr__(self):
        return f"<DutyAssignment {self.title} {self.duty_date}>"


class DutyReport(Base):
    """A prefect's write-up after completing a duty"""
    __tablename__ = "duty_reports"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    assignment_id = Column(GUID, ForeignKey("duty_assignments.id", ondelete="CASCADE"), nullable=False, index=True)
    prefect_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    report = Column(Text, nullable=False)
    issues_encountered = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    assignment = relationship("DutyAssignment", back_populates="reports")
