from sqlalchemy import Column, DateTime, Text, Numeric, ForeignKey, UniqueConstraint
import enum

from prefect_portal.core.database import Base
from prefect_portal.core.types import GUID, generate_uuid, utcnow, enum_column_type


class ApplicationStatus(str, enum.Enum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"


class PrefectApplication(Base):
    """A student's application to become a prefect for one academic year"""
    __tablename__ = "prefect_applications"

    __table_args__ = (
        UniqueConstraint('applicant_id', 'academic_year_id', name='uq_application_applicant_year'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    applicant_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    academic_year_id = Column(GUID, ForeignKey("academic_years.id", ondelete="CASCADE"), nullable=False)
    statement = Column(Text, nullable=False)
    gpa = Column(Numeric(3, 2), nullable=True)
    status = Column(enum_column_type(ApplicationStatus), default=ApplicationStatus.PENDING, nullable=False)
    reviewed_by = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    review_notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<PrefectApplication {self.applicant_id} ({self.status})>"
