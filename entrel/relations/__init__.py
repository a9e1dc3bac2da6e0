#!/usr/bin/env python3
"""
relations package
-----------------
Relation lifecycle between host objects and entities.

- fields: Prefixed form-field convention and its typed view
- conflicts: Availability checker contract and date formatting
- validation: Field-keyed validation results
- handler: RelationHandler, validate/save/delete orchestration

Usage:
    from entrel.relations import RelationHandler, DateRange
"""
from .conflicts import (
    Conflict,
    ConflictChecker,
    ConflictReport,
    DateRange,
    NoConflictChecker,
    format_date_range,
)
from .fields import (
    ENTITYAREA_PREFIX,
    ENTITYID_PREFIX,
    ENTITYNAME_PREFIX,
    FIELD_PREFIXES,
    RELATIONID_PREFIX,
    SENTINEL_NONE,
    EntityFieldRow,
    EntityFieldSet,
    entityarea_field,
    entityid_field,
    entityname_field,
    relationid_field,
)
from .handler import RelationHandler, RelationView
from .validation import ValidationResult, conflict_messages

__all__ = [
    "Conflict",
    "ConflictChecker",
    "ConflictReport",
    "DateRange",
    "NoConflictChecker",
    "format_date_range",
    "ENTITYAREA_PREFIX",
    "ENTITYID_PREFIX",
    "ENTITYNAME_PREFIX",
    "FIELD_PREFIXES",
    "RELATIONID_PREFIX",
    "SENTINEL_NONE",
    "EntityFieldRow",
    "EntityFieldSet",
    "entityarea_field",
    "entityid_field",
    "entityname_field",
    "relationid_field",
    "RelationHandler",
    "RelationView",
    "ValidationResult",
    "conflict_messages",
]
