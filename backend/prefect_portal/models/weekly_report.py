from sqlalchemy import Column, Date, DateTime, Text, ForeignKey, Index

from prefect_portal.core.database import Base
from prefect_portal.core.types import GUID, generate_uuid, utcnow


class WeeklyReport(Base):
    __tablename__ = "weekly_reports"

    __table_args__ = (
        Index('ix_weekly_reports_week_start', 'week_start'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    prefect_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    week_start = Column(Date, nullable=False)
    week_end = Column(Date, nullable=False)
    summary = Column(Text, nullable=False)
    achievements = Column(Text, nullable=True)
    challenges = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<WeeklyReport {self.prefect_id} {self.week_start}..{self.week_end}>"
