#!/usr/bin/env python3
"""
hierarchy.py
------------
Enumerates the host objects that belong to a parent host.

Host tables belong to other subsystems and are not mapped by entrel. The
SQL implementation addresses them with lightweight ``table()`` /
``column()`` constructs driven by the host area registry, so no ORM model
or foreign key to those tables is needed.

Usage:
    hierarchy = SqlHostHierarchy(session, default_registry())

    # ids of booking_options rows with bookingid = 1
    hierarchy.child_ids("mod_booking", "option", 1)
"""
from typing import Optional, Protocol, Set

from sqlalchemy import column, select, table
from sqlalchemy.orm import Session

from entrel.core.logging_manager import EntrelLogger, safe_logger
from entrel.database.configs import HostAreaRegistry
from entrel.database.decorators import handle_db_errors


class HostHierarchy(Protocol):
    """Lookup of host ids under a parent host."""

    def child_ids(self, component: str, area: str, parent_id: int) -> Set[int]:
        """Ids of the ``area`` hosts whose parent is ``parent_id``."""
        ...


class SqlHostHierarchy:
    """
    HostHierarchy reading the host subsystem's tables.

    Attributes:
        session: SQLAlchemy session sharing the host tables' database
        registry: Host area registry naming table and parent column
        logger: Optional logger
    """

    def __init__(
        self,
        session: Session,
        registry: HostAreaRegistry,
        logger: Optional[EntrelLogger] = None,
    ) -> None:
        self.session = session
        self.registry = registry
        self.logger = logger

    @handle_db_errors
    def child_ids(self, component: str, area: str, parent_id: int) -> Set[int]:
        """
        Ids of the hosts of ``(component, area)`` under a parent.

        Args:
            component: Owning subsystem
            area: Area of the hosts to enumerate
            parent_id: Id stored in the area's parent column

        Returns:
            Set of host ids (empty when the parent has none)

        Raises:
            InvalidArgumentError: If the area is not registered
            StorageError: If the host table cannot be read
        """
        config = self.registry.get(component, area)
        hosts = table(config.table, column("id"), column(config.parent_column))

        ids = set(
            self.session.execute(
                select(hosts.c.id).where(hosts.c[config.parent_column] == parent_id)
            ).scalars()
        )

        safe_logger(self.logger).log_debug(
            f"Resolved {len(ids)} {component}/{area} hosts",
            {"parent_id": parent_id, "table": config.table},
        )
        return ids
