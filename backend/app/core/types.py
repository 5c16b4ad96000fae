"""Custom SQLAlchemy column types and defaults shared by all models"""
from datetime import datetime, timezone
from sqlalchemy import TypeDecorator, String
import uuid


def generate_uuid() -> str:
    """Generate a UUID string for primary keys"""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the DateTime columns (no timezone)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class GUID(TypeDecorator):
    """Identifier stored as VARCHAR(36) on every backend.

    Client-supplied profile ids are kept verbatim, so values are not
    forced through uuid.UUID.
    """
    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(value)
        return value

    def process_result_value(self, value, dialect):
        if value is not None:
            return str(value)
        return value
