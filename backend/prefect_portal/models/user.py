from sqlalchemy import Column, String, Boolean, DateTime, Integer, Text, ForeignKey, UniqueConstraint, Index
from sqlalchemy.orm import relationship
import enum

from prefect_portal.core.database import Base
from prefect_portal.core.types import GUID, generate_uuid, utcnow, enum_column_type


class AppRole(str, enum.Enum):
    """Roles a user can hold; a user may hold several"""
    ADMIN = "admin"
    PREFECT = "prefect"
    FACULTY = "faculty"
    STUDENT = "student"


class Theme(str, enum.Enum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


class User(Base):
    """Account plus profile fields"""
    __tablename__ = "users"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    student_id = Column(String(50), unique=True, nullable=True)
    phone = Column(String(20), nullable=True)
    department = Column(String(100), nullable=True)
    year_level = Column(Integer, nullable=True)
    section = Column(String(50), nullable=True)
    avatar_url = Column(Text, nullable=True)
    theme = Column(enum_column_type(Theme), default=Theme.SYSTEM, nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
    last_login = Column(DateTime, nullable=True)

    role_assignments = relationship(
        "UserRoleAssignment",
        back_populates="user",
        cascade="all, delete-orphan",
        foreign_keys="UserRoleAssignment.user_id",
        lazy="selectin",
    )

    @property
    def roles(self) -> set:
        return {assignment.role for assignment in self.role_assignments}

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self):
        return f"<User {self.email}>"


class UserRoleAssignment(Base):
    """Many-to-many between users and AppRole"""
    __tablename__ = "user_roles"

    __table_args__ = (
        UniqueConstraint('user_id', 'role', name='uq_user_roles_user_role'),
        Index('ix_user_roles_role', 'role'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(enum_column_type(AppRole), nullable=False)
    assigned_at = Column(DateTime, default=utcnow, nullable=False)
    assigned_by = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    user = relationship("User", back_populates="role_assignments", foreign_keys=[user_id])

    def __repr__(self):
        return f"<UserRoleAssignment {self.user_id}:{self.role}>"
