"""Reference data: departments and academic years"""
from sqlalchemy import Column, String, Boolean, DateTime, Integer, Text, UniqueConstraint

from prefect_portal.core.database import Base
from prefect_portal.core.types import GUID, generate_uuid, utcnow


class Department(Base):
    __tablename__ = "departments"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(150), unique=True, nullable=False)
    code = Column(String(20), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<Department {self.code}>"


class AcademicYear(Base):
    __tablename__ = "academic_years"

    __table_args__ = (
        UniqueConstraint('year_start', 'year_end', 'semester', name='uq_academic_year_term'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    year_start = Column(Integer, nullable=False)
    year_end = Column(Integer, nullable=False)
    semester = Column(String(50), nullable=False)
    is_current = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    @property
    def label(self) -> str:
        return f"{self.year_start}-{self.year_end} {self.semester}"

    def __repr__(self):
        return f"<AcademicYear {self.label}>"
