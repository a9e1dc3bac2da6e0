#!/usr/bin/env python3
"""
managers package
--------------------
Session-bound stores for the entrel database.

Available Managers:
    BaseManager: Abstract base class with common utilities
    EntityManager: Entity repository (lookups, projections, price factor)
    RelationManager: Relation store keyed by host address

Usage:
    from entrel.database.managers import EntityManager, RelationManager

    entities = EntityManager(session, logger)
    relations = RelationManager(session, logger)
"""
from .base_manager import BaseManager
from .entity_manager import EntityManager
from .relation_manager import BulkDeleteResult, RelationManager

__all__ = [
    "BaseManager",
    "EntityManager",
    "RelationManager",
    "BulkDeleteResult",
]
