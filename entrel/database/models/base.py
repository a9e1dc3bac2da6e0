"""
Base Classes
------------

Foundational ORM classes for the entrel database.

Classes:
    - Base: Declarative base for all SQLAlchemy models
    - UTCDateTime: DateTime column that always loads as UTC-aware
    - TimestampMixin: created/modified timestamps for editable records
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from datetime import datetime, timezone
from typing import Optional

# --- Third party ---
from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


# --- Column types ---
class UTCDateTime(TypeDecorator):
    """
    Timezone-aware DateTime stored as UTC.

    SQLite keeps no offset, so values are converted to UTC on the way in
    and get UTC re-attached on the way out. Naive input is taken as UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


# --- Base ORM class ---
class Base(DeclarativeBase):
    """
    Base class for all ORM models.

    Serves as the declarative base for SQLAlchemy models and provides
    access to the metadata object for table creation and migrations.
    """

    pass


# --- Timestamps ---
class TimestampMixin:
    """
    Mixin providing creation and modification timestamps.

    Attributes:
        timecreated: When the record was first stored
        timemodified: When the record was last changed
    """

    timecreated: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utc_now
    )
    timemodified: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime, nullable=True, onupdate=utc_now
    )
