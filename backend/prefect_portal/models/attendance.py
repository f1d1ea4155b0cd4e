from sqlalchemy import Column, Date, DateTime, Text, ForeignKey, UniqueConstraint, Index
import enum

from prefect_portal.core.database import Base
from prefect_portal.core.types import GUID, generate_uuid, utcnow, enum_column_type


class AttendanceStatus(str, enum.Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"


class Attendance(Base):
    """One attendance entry per prefect per day"""
    __tablename__ = "attendance"

    __table_args__ = (
        UniqueConstraint('prefect_id', 'date', name='uq_attendance_prefect_date'),
        Index('ix_attendance_date', 'date'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    prefect_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    time_in = Column(DateTime, nullable=True)
    time_out = Column(DateTime, nullable=True)
    status = Column(enum_column_type(AttendanceStatus), default=AttendanceStatus.PRESENT, nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<Attendance {self.prefect_id} {self.date} {self.status}>"
