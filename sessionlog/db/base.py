import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Uuid
from sqlalchemy.orm import declarative_base
from sqlalchemy.types import TypeDecorator

# 1. Base class every model inherits from
Base = declarative_base()


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    DateTime that always round-trips as timezone-aware UTC.

    PostgreSQL keeps the offset in TIMESTAMPTZ; SQLite drops it and hands
    back naive values, which are stored and read as UTC here.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(timezone.utc)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


# 2. Mixins


class UUIDMixin:
    """Adds an application-generated UUID primary key"""

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)


class TimestampMixin:
    """Adds created_at"""

    created_at = Column(UTCDateTime(), nullable=False, default=utcnow)
