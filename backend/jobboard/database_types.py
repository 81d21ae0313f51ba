"""
Custom SQLAlchemy types for cross-database compatibility.
"""
from datetime import datetime, timezone

from sqlalchemy import DateTime, TypeDecorator


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware UTC datetime.

    Uses PostgreSQL's TIMESTAMP WITH TIME ZONE when available. SQLite has no
    timezone support, so values are stored as naive UTC and the tzinfo is
    re-attached on load. Python code only ever sees aware UTC datetimes.
    """
    impl = DateTime
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(DateTime(timezone=True))
        else:
            return dialect.type_descriptor(DateTime())

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if value.tzinfo is None:
            raise ValueError("UTCDateTime requires a timezone-aware datetime")
        value = value.astimezone(timezone.utc)
        if dialect.name == 'postgresql':
            return value
        return value.replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def utcnow() -> datetime:
    """Current instant as an aware UTC datetime."""
    return datetime.now(timezone.utc)
