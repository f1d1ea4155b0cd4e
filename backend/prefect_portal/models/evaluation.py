from sqlalchemy import Column, Integer, DateTime, Text, ForeignKey, CheckConstraint

from prefect_portal.core.database import Base
from prefect_portal.core.types import GUID, generate_uuid, utcnow


class PerformanceEvaluation(Base):
    __tablename__ = "performance_evaluations"

    __table_args__ = (
        CheckConstraint('rating >= 1 AND rating <= 5', name='ck_evaluation_rating_range'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    prefect_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    evaluator_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    academic_year_id = Column(GUID, ForeignKey("academic_years.id", ondelete="SET NULL"), nullable=True)
    rating = Column(Integer, nullable=False)
    comments = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<PerformanceEvaluation {self.prefect_id} rating={self.rating}>"
