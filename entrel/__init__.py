"""
entrel
======

Polymorphic entity relations.

Attaches bookable entities (rooms, locations, equipment) to host objects
owned by other subsystems. A host is addressed by the weak composite key
``(component, area, instanceid)`` instead of a foreign key, so any
subsystem can reference an entity without a schema change.

Main Components:
    - core: Exceptions, logging, validators, paths
    - database: ORM models, entity/relation managers, EntrelDB facade, CLI
    - relations: Form field protocol, conflict-check contract, RelationHandler

Example Usage:
    >>> from entrel.database import EntrelDB
    >>> from entrel.core.paths import DB_PATH, ALEMBIC_DIR, LOG_DIR
    >>> db = EntrelDB(db_path=DB_PATH, alembic_dir=ALEMBIC_DIR, log_dir=LOG_DIR)
    >>> with db.session_scope() as session:
    ...     handler = db.handler("mod_booking", "option")
    ...     handler.save_simple(42, 5)
"""

__version__ = "1.0.0"
