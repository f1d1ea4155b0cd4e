from sqlalchemy import Column, String, Boolean, DateTime, Text, ForeignKey, Index
import enum

from prefect_portal.core.database import Base
from prefect_portal.core.types import GUID, generate_uuid, utcnow, enum_column_type


class IncidentSeverity(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class IncidentReport(Base):
    __tablename__ = "incident_reports"

    __table_args__ = (
        Index('ix_incident_reports_severity', 'severity'),
        Index('ix_incident_reports_is_resolved', 'is_resolved'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    reported_by = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    severity = Column(enum_column_type(IncidentSeverity), default=IncidentSeverity.LOW, nullable=False)
    location = Column(String(255), nullable=True)
    incident_date = Column(DateTime, default=utcnow, nullable=False)
    is_resolved = Column(Boolean, default=False, nullable=False)
    resolved_by = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    resolved_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<IncidentReport {self.title} ({self.severity})>"
