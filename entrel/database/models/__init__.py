"""
Database Models Package
------------------------

SQLAlchemy ORM models for the entrel database.

- base: Base class and timestamp mixin
- entities: Entity, EntityAddress
- relations: HostAddress value type, EntityRelation

Usage:
    from entrel.database.models import Entity, EntityRelation, HostAddress
"""
from .base import Base, TimestampMixin, UTCDateTime, utc_now
from .entities import Entity, EntityAddress
from .relations import EntityRelation, HostAddress

__all__ = [
    "Base",
    "TimestampMixin",
    "UTCDateTime",
    "utc_now",
    "Entity",
    "EntityAddress",
    "EntityRelation",
    "HostAddress",
]
