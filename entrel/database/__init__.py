#!/usr/bin/env python3
"""
entrel Database Package
-----------------------
Persistence layer for entities and their relations to host objects.

- manager: EntrelDB facade (engine, sessions, stores, migrations)
- models: SQLAlchemy ORM models
- managers: Entity and relation stores
- configs: Host area registry
- hierarchy: Host-under-parent lookup
"""

from .manager import EntrelDB
from entrel.core.exceptions import (
    DatabaseError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from .decorators import (
    log_database_operation,
    handle_db_errors,
    validate_metadata,
)
from .hierarchy import HostHierarchy, SqlHostHierarchy

__all__ = [
    # Main manager
    "EntrelDB",
    # Exceptions
    "DatabaseError",
    "NotFoundError",
    "StorageError",
    "ValidationError",
    # Decorators
    "log_database_operation",
    "handle_db_errors",
    "validate_metadata",
    # Host lookup
    "HostHierarchy",
    "SqlHostHierarchy",
]
