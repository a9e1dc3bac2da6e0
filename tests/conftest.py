"""
conftest.py
-----------
Shared pytest fixtures for entrel tests.

Provides fixtures for:
- Database setup and teardown (entrel tables plus booking host tables)
- Manager and handler instances
- Fakes for the conflict checker, host hierarchy and clock
"""
import pytest
from datetime import datetime, timedelta, timezone
from pathlib import Path
from tempfile import TemporaryDirectory
from typing import Dict, List, Set, Tuple

from sqlalchemy import Column, Integer, MetaData, Table, create_engine

from entrel.relations import ConflictReport


# ----- Host tables -----
# Owned by the booking subsystem in production; created here so the SQL
# host hierarchy has something to read.

HOST_METADATA = MetaData()

BOOKING_OPTIONS = Table(
    "booking_options",
    HOST_METADATA,
    Column("id", Integer, primary_key=True),
    Column("bookingid", Integer, nullable=False),
)

BOOKING_OPTIONDATES = Table(
    "booking_optiondates",
    HOST_METADATA,
    Column("id", Integer, primary_key=True),
    Column("optionid", Integer, nullable=False),
)


# ----- Fakes -----

class FakeConflictChecker:
    """ConflictChecker returning canned reports and recording calls."""

    def __init__(self, reports=None):
        self.reports = dict(reports or {})
        self.calls: List[Tuple] = []

    def check(self, entity_id, date_ranges, host_id, area):
        self.calls.append((entity_id, list(date_ranges), host_id, area))
        report = self.reports.get(entity_id)
        return report if report is not None else ConflictReport()


class FakeHierarchy:
    """HostHierarchy backed by a dict of (component, area, parent) → ids."""

    def __init__(self, children: Dict[Tuple[str, str, int], Set[int]] = None):
        self.children = dict(children or {})

    def child_ids(self, component, area, parent_id):
        return set(self.children.get((component, area, parent_id), set()))


class FakeClock:
    """Callable clock that moves forward one minute per call."""

    def __init__(self, start=None):
        self.now = start or datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc)

    def __call__(self):
        current = self.now
        self.now = self.now + timedelta(minutes=1)
        return current


# ----- Path Fixtures -----

@pytest.fixture
def tmp_dir():
    """Create a temporary directory for test file operations."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_db_path(tmp_dir):
    """Create temporary test database path."""
    return tmp_dir / "test.db"


@pytest.fixture
def test_alembic_dir():
    """Path to the package's Alembic directory."""
    from entrel.core.paths import ALEMBIC_DIR

    return ALEMBIC_DIR


# ----- Test Database Fixtures -----

@pytest.fixture
def test_db(test_db_path, test_alembic_dir):
    """
    Create test database instance with schema.

    Returns an EntrelDB instance whose database holds the entrel tables
    and the booking host tables. Database is torn down after the test.
    """
    from entrel.database.manager import EntrelDB
    from entrel.database.models import Base

    engine = create_engine(f"sqlite:///{test_db_path}")
    Base.metadata.create_all(engine)
    HOST_METADATA.create_all(engine)

    db = EntrelDB(db_path=test_db_path, alembic_dir=test_alembic_dir)

    yield db

    db.engine.dispose()
    engine.dispose()
    if test_db_path.exists():
        test_db_path.unlink()


@pytest.fixture
def db_session(test_db):
    """
    Create a database session for tests.

    Provides a session with automatic rollback after test.
    """
    with test_db.session_scope() as session:
        yield session
        session.rollback()


@pytest.fixture
def entity_manager(db_session):
    """Create EntityManager instance for testing."""
    from entrel.database.managers.entity_manager import EntityManager

    return EntityManager(db_session)


@pytest.fixture
def relation_manager(db_session):
    """Create RelationManager instance for testing."""
    from entrel.database.managers.relation_manager import RelationManager

    return RelationManager(db_session)


@pytest.fixture
def make_entities(db_session):
    """
    Factory storing entities with fixed ids.

    Usage:
        rooms = make_entities(5, 7, 9)   # {5: Entity, 7: Entity, 9: Entity}
    """
    from entrel.database.models import Entity

    def _make(*ids, parent=None):
        created = {}
        for entity_id in ids:
            entity = Entity(
                id=entity_id,
                name=f"Room {entity_id}",
                shortname=f"R{entity_id}",
                parentid=parent.id if parent is not None else None,
            )
            db_session.add(entity)
            created[entity_id] = entity
        db_session.flush()
        return created

    return _make


@pytest.fixture
def add_hosts(db_session):
    """
    Factory inserting rows into a booking host table.

    Usage:
        add_hosts("booking_options", "bookingid", 1, [10, 11, 12])
    """

    def _add(table_name, parent_column, parent_id, ids):
        db_session.execute(
            HOST_METADATA.tables[table_name].insert(),
            [{"id": host_id, parent_column: parent_id} for host_id in ids],
        )
        db_session.flush()

    return _add


@pytest.fixture
def conflict_checker():
    """Conflict checker reporting nothing until told otherwise."""
    return FakeConflictChecker()


@pytest.fixture
def hierarchy():
    """In-memory host hierarchy."""
    return FakeHierarchy()


@pytest.fixture
def clock():
    """Deterministic clock."""
    return FakeClock()


@pytest.fixture
def option_handler(relation_manager, entity_manager, conflict_checker, hierarchy, clock):
    """RelationHandler for booking options with fake collaborators."""
    from entrel.relations import RelationHandler

    return RelationHandler(
        "mod_booking",
        "option",
        relations=relation_manager,
        entities=entity_manager,
        conflict_checker=conflict_checker,
        hierarchy=hierarchy,
        clock=clock,
    )


