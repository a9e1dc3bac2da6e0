#!/usr/bin/env python3
"""
manager.py
--------------------
Database manager for the entrel entity-relation system.

Provides the EntrelDB class for interacting with the SQLite database.
Handles:
    - Initialization of the database engine and sessionmaker
    - Per-session entity and relation stores
    - Relation handlers bound to a (component, area) host kind
    - Migration management via Alembic

Key Features:
    - Transaction management with automatic rollback
    - SAVEPOINT support on SQLite for atomic relation upserts
    - Foreign key enforcement (relations vanish with their entity)
    - Comprehensive logging with rotation

Usage:
    db = EntrelDB(DB_PATH, ALEMBIC_DIR, log_dir=LOG_DIR)

    with db.session_scope():
        entity = db.entities.create({"name": "Room 101"})
        handler = db.handler("mod_booking", "option")
        handler.save_simple(42, entity.id)

Notes
==============
- Migrations are handled via Alembic (entrel/migrations)
- All datetime fields are UTC-aware
- Host tables (booking_options, ...) are owned by the host subsystem and
  are only read, never created, by entrel
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Optional, Union

# --- Third party ---
from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext

# --- Local imports ---
from entrel.core.exceptions import DatabaseError
from entrel.core.logging_manager import EntrelLogger
from entrel.core.paths import ALEMBIC_INI
from .configs import HostAreaRegistry, default_registry
from .decorators import handle_db_errors, log_database_operation
from .hierarchy import SqlHostHierarchy
from .managers import EntityManager, RelationManager
from .models import Base

if TYPE_CHECKING:
    from entrel.relations import ConflictChecker, RelationHandler


def _enable_sqlite_savepoints(engine: Engine) -> None:
    """
    Let SQLAlchemy own transaction boundaries on pysqlite connections.

    pysqlite's implicit BEGIN handling breaks SAVEPOINT. The driver's own
    transaction control is switched off and BEGIN is emitted by SQLAlchemy
    instead. Foreign keys are enabled per connection.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


# ----- Main Database Manager -----
class EntrelDB:
    """
    Main database manager for the entrel database.

    Attributes:
        - db_path (Path): Filesystem path to the SQLite database file.
        - alembic_dir (Path): Filesystem path to the Alembic directory.
        - registry (HostAreaRegistry): Host kinds handlers may serve.
        - engine (Engine): SQLAlchemy engine instance.
        - SessionLocal (sessionmaker): SQLAlchemy session factory.

    Usage:
        db = EntrelDB("~/path/to/entities.db", ALEMBIC_DIR)
        with db.session_scope() as session:
            entity = db.entities.get(5)
    """

    # ---- Initialization ----
    def __init__(
        self,
        db_path: Union[str, Path],
        alembic_dir: Union[str, Path],
        log_dir: Optional[Union[str, Path]] = None,
        registry: Optional[HostAreaRegistry] = None,
    ) -> None:
        """
        Initialize database engine and session factory.

        Args:
            db_path (str | Path): Path to the SQLite file.
            alembic_dir (str | Path): Path to the Alembic directory.
            log_dir (str | Path): Directory for log files (optional)
            registry (HostAreaRegistry): Host areas (default: built-in areas)
        """
        self.db_path = Path(db_path).expanduser().resolve()
        self.alembic_dir = Path(alembic_dir).expanduser().resolve()
        self.registry = registry if registry is not None else default_registry()

        # --- Logging ---
        if log_dir:
            self.log_dir = Path(log_dir).expanduser().resolve()
            self.logger: Optional[EntrelLogger] = EntrelLogger(
                self.log_dir, component_name="database"
            )
        else:
            self.logger = None

        # Session-bound stores (set inside session_scope)
        self._session: Optional[Session] = None
        self._entity_manager: Optional[EntityManager] = None
        self._relation_manager: Optional[RelationManager] = None

        self._setup_engine()

    def _setup_engine(self) -> None:
        """Initialize database engine and session factory."""
        try:
            if self.logger:
                self.logger.log_operation(
                    "database_init_start",
                    {
                        "db_path": str(self.db_path),
                        "alembic_dir": str(self.alembic_dir),
                    },
                )

            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            is_new_file = not self.db_path.exists()

            self.engine: Engine = create_engine(
                f"sqlite:///{self.db_path}",
                echo=False,
                pool_pre_ping=True,
            )
            _enable_sqlite_savepoints(self.engine)

            self.SessionLocal: sessionmaker = sessionmaker(
                bind=self.engine,
                autoflush=True,
                expire_on_commit=False,
            )

            self.alembic_cfg: Config = self._setup_alembic()

            if is_new_file:
                self.initialize_schema()

            if self.logger:
                self.logger.log_operation("database_init_complete", {"success": True})

        except Exception as e:
            if self.logger:
                self.logger.log_error(e, {"operation": "database_init"})
            raise DatabaseError(f"Database initialization failed: {e}") from e

    # ---- Session Management ----
    @contextmanager
    def session_scope(self):
        """
        Provide a transactional scope around operations with logging.

        Stores are available via ``db.entities`` and ``db.relations`` while
        the scope is open. The transaction commits on success and rolls
        back (re-raising) on any exception.

        Usage:
            with db.session_scope() as session:
                db.relations.delete_by_address(address)
        """
        session = self.SessionLocal()
        session_id = datetime.now().strftime("%Y%m%d_%H%M%S_%f")

        self._session = session
        self._entity_manager = EntityManager(session, self.logger)
        self._relation_manager = RelationManager(session, self.logger)

        if self.logger:
            self.logger.log_debug("session_start", {"session_id": session_id})

        try:
            yield session
            session.commit()
            if self.logger:
                self.logger.log_debug("session_commit", {"session_id": session_id})

        except Exception as e:
            session.rollback()
            if self.logger:
                self.logger.log_error(
                    e, {"operation": "session_rollback", "session_id": session_id}
                )
            raise
        finally:
            self._session = None
            self._entity_manager = None
            self._relation_manager = None

            session.close()
            if self.logger:
                self.logger.log_debug("session_close", {"session_id": session_id})

    # -------------------------------------------------------------------------
    # Store Properties
    # -------------------------------------------------------------------------

    @property
    def entities(self) -> EntityManager:
        """
        Access EntityManager for entity operations.

        Recommended usage:
            with db.session_scope():
                room = db.entities.create({"name": "Room 101"})

        Raises:
            DatabaseError: If accessed outside of session_scope context
        """
        if self._entity_manager is None:
            raise DatabaseError(
                "EntityManager requires active session. "
                "Use within session_scope: "
                "with db.session_scope() as session: db.entities.get(...)"
            )
        return self._entity_manager

    @property
    def relations(self) -> RelationManager:
        """
        Access RelationManager for relation operations.

        Raises:
            DatabaseError: If accessed outside of session_scope context
        """
        if self._relation_manager is None:
            raise DatabaseError(
                "RelationManager requires active session. "
                "Use within session_scope."
            )
        return self._relation_manager

    @property
    def hierarchy(self) -> SqlHostHierarchy:
        """
        Host hierarchy reading the host tables through the active session.

        Raises:
            DatabaseError: If accessed outside of session_scope context
        """
        if self._session is None:
            raise DatabaseError(
                "Host hierarchy requires active session. "
                "Use within session_scope."
            )
        return SqlHostHierarchy(self._session, self.registry, self.logger)

    def handler(
        self,
        component: str,
        area: str,
        conflict_checker: Optional[ConflictChecker] = None,
    ) -> RelationHandler:
        """
        Build a RelationHandler bound to the active session.

        Args:
            component: Owning subsystem of the hosts
            area: Area of the hosts
            conflict_checker: Availability checker (default: none)

        Returns:
            RelationHandler

        Raises:
            DatabaseError: If called outside of session_scope context
            InvalidArgumentError: If (component, area) is not registered
        """
        from entrel.relations import RelationHandler

        return RelationHandler(
            component,
            area,
            relations=self.relations,
            entities=self.entities,
            conflict_checker=conflict_checker,
            hierarchy=self.hierarchy,
            registry=self.registry,
            logger=self.logger,
        )

    # ---- Alembic setup ----
    def _setup_alembic(self) -> Config:
        """Setup Alembic configuration."""
        try:
            if self.logger:
                self.logger.log_debug("Setting up Alembic configuration...")

            alembic_cfg = Config(str(ALEMBIC_INI)) if ALEMBIC_INI.exists() else Config()
            alembic_cfg.set_main_option("script_location", str(self.alembic_dir))
            alembic_cfg.set_main_option("sqlalchemy.url", f"sqlite:///{self.db_path}")
            alembic_cfg.set_main_option(
                "file_template",
                "%%(year)d%%(month).2d%%(day).2d_%%(hour).2d%%(minute).2d_%%(slug)s",
            )
            alembic_cfg.attributes["configure_logger"] = False

            if self.logger:
                self.logger.log_debug("Alembic configuration setup complete")
            return alembic_cfg
        except Exception as e:
            if self.logger:
                self.logger.log_error(e, {"operation": "setup_alembic"})
            raise DatabaseError(f"Alembic configuration failed: {e}") from e

    @handle_db_errors
    @log_database_operation("initialize_schema")
    def initialize_schema(self) -> None:
        """
        Initialize database - create tables if needed and run migrations.

        Actions:
            Checks if the database has none of the entrel tables
            If so,
                creates all tables from the ORM models
                stamps the Alembic revision to head
            If not,
                runs pending migrations to update schema
        """
        try:
            with self.engine.connect() as conn:
                existing = set(self.engine.dialect.get_table_names(conn))
            is_fresh_db = not (existing & set(Base.metadata.tables))

            if is_fresh_db:
                Base.metadata.create_all(bind=self.engine)
                command.stamp(self.alembic_cfg, "head")
                if self.logger:
                    self.logger.log_operation(
                        "fresh_database_created",
                        {"tables_created": len(Base.metadata.tables)},
                    )
            else:
                self.upgrade_database()
                if self.logger:
                    self.logger.log_operation(
                        "existing_database_migrated",
                        {"table_count": len(existing)},
                    )

        except DatabaseError:
            raise
        except Exception as e:
            raise DatabaseError(f"Could not initialize database: {e}") from e

    @handle_db_errors
    @log_database_operation("upgrade_database")
    def upgrade_database(self, revision: str = "head") -> None:
        """
        Upgrade the database schema to the specified Alembic revision.

        Args:
            revision (str, optional):
                The target revision to upgrade to.
                Defaults to 'head' (latest revision).
        """
        try:
            command.upgrade(self.alembic_cfg, revision)
        except Exception as e:
            raise DatabaseError(f"Database upgrade failed: {e}") from e

    @handle_db_errors
    @log_database_operation("downgrade_database")
    def downgrade_database(self, revision: str) -> None:
        """
        Downgrade the database schema to a specified Alembic revision.

        Args:
            revision (str): The target revision to downgrade to.
        """
        try:
            command.downgrade(self.alembic_cfg, revision)
        except Exception as e:
            raise DatabaseError(f"Database downgrade to {revision} failed: {e}") from e

    def get_migration_history(self) -> Dict[str, Optional[str]]:
        """
        Get the current migration status of the database.

        Returns:
            Dictionary with keys:
                - 'current_revision' (str | None):
                  Current Alembic revision of the database.
                - 'status' (str):
                  Either 'up_to_date' or 'needs_migration'.
                - 'error' (str, optional):
                  Present if an exception occurred.
        """
        try:
            with self.engine.connect() as conn:
                context = MigrationContext.configure(conn)
                current_rev = context.get_current_revision()

            return {
                "current_revision": current_rev,
                "status": "up_to_date" if current_rev else "needs_migration",
            }
        except Exception as e:
            if self.logger:
                self.logger.log_error(e, {"operation": "get_migration_history"})
            return {"error": str(e)}

    # ----- Context Manager Support -----
    def __enter__(self) -> "EntrelDB":
        """Support for context manager usage."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Release pooled connections on exit."""
        del exc_type, exc_val, exc_tb
        self.engine.dispose()
