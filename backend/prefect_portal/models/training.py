from sqlalchemy import Column, String, Boolean, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship

from prefect_portal.core.database import Base
from prefect_portal.core.types import GUID, generate_uuid, utcnow


class TrainingCategory(Base):
    __tablename__ = "training_categories"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(150), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    created_by = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    materials = relationship("TrainingMaterial", back_populates="category", cascade="all, delete-orphan",
                             passive_deletes=True)

    def __repr__(self):
        return f"<TrainingCategory {self.name}>"


class TrainingMaterial(Base):
    __tablename__ = "training_materials"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    category_id = Column(GUID, ForeignKey("training_categories.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=True)
    file_url = Column(Text, nullable=True)
    created_by = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    is_published = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    category = relationship("TrainingCategory", back_populates="materials")

    def __repr__(self):
        return f"<TrainingMaterial {self.title}>"
