from sqlalchemy import Column, Date, DateTime, Time, Text, ForeignKey, Index

from prefect_portal.core.database import Base
from prefect_portal.core.types import GUID, generate_uuid, utcnow


class GateAssistanceLog(Base):
    __tablename__ = "gate_assistance_logs"

    __table_args__ = (
        Index('ix_gate_assistance_logs_log_date', 'log_date'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    prefect_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    log_date = Column(Date, nullable=False)
    time_in = Column(Time, nullable=False)
    time_out = Column(Time, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<GateAssistanceLog {self.prefect_id} {self.log_date}>"
