"""Column types and helpers shared by every model"""
from datetime import datetime
import uuid

from sqlalchemy import TypeDecorator, String, Enum as SQLEnum

def generate_uuid() -> str:
    """Server-assigned record id"""
    return str(uuid.uuid4())

def utcnow() -> datetime:
    return datetime.utcnow()

class GUID(TypeDecorator):
    """UUID stored as VARCHAR(36) on every backend, surfaced as str"""
    impl = String(36)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        return dialect.type_descriptor(String(36))

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        # Lowercase so lookups by id are stable
        return str(value).lower()

    def process_result_value(self, value, dialect):
        return None if value is None else str(value)


def enum_column_type(enum_cls):
    """Enum stored by value as VARCHAR, so 'in_progress' is what the table holds"""
    return SQLEnum(
        enum_cls,
        values_callable=lambda members: [member.value for member in members],
        native_enum=False,
        length=32,
        validate_strings=True,
    )
