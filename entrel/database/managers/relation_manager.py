#!/usr/bin/env python3
"""
relation_manager.py
--------------------
Manages EntityRelation rows: the persisted association between a host
object and an entity.

This manager exclusively owns relation persistence. It never decides
*which* relation should exist; that is the RelationHandler's job.

Key Features:
    - Lookup by host address (component, area, instanceid)
    - Insert / update-in-place / delete by address
    - Atomic upsert keyed by the host address
    - Best-effort bulk delete with per-id failure reporting
    - Distinct-entity counting for divergence checks

Usage:
    rel_mgr = RelationManager(session, logger)
    address = HostAddress("mod_booking", "option", 42)

    relation = rel_mgr.upsert(address, entityid=5)
    rel_mgr.get_entity_id_for_address(address)   # 5
    rel_mgr.delete_by_address(address)           # True
    rel_mgr.delete_by_address(address)           # False, nothing left
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import distinct, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from entrel.core.exceptions import NotFoundError, StorageError
from entrel.core.logging_manager import safe_logger
from entrel.database.decorators import handle_db_errors, log_database_operation
from entrel.database.models import EntityRelation, HostAddress, utc_now
from .base_manager import BaseManager


@dataclass
class BulkDeleteResult:
    """
    Outcome of a best-effort bulk delete.

    Attributes:
        deleted: Number of relation rows removed
        failed_ids: Instance ids whose delete raised a storage error
    """

    deleted: int = 0
    failed_ids: List[int] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True when no individual delete failed."""
        return not self.failed_ids

    def __bool__(self) -> bool:
        return self.success


class RelationManager(BaseManager):
    """
    CRUD over EntityRelation rows, keyed by host address.

    Invariant: at most one row per (component, area, instanceid).
    """

    def _query_address(self, address: HostAddress):
        return (
            self.session.query(EntityRelation)
            .filter(EntityRelation.component == address.component)
            .filter(EntityRelation.area == address.area)
            .filter(EntityRelation.instanceid == address.instanceid)
        )

    # =========================================================================
    # READ
    # =========================================================================

    @handle_db_errors
    @log_database_operation("find_relation_by_address")
    def find_by_address(self, address: HostAddress) -> Optional[EntityRelation]:
        """
        Retrieve the relation stored for a host address.

        Args:
            address: Host address to look up

        Returns:
            EntityRelation if found, None otherwise
        """
        return self._query_address(address).order_by(EntityRelation.id).first()

    @handle_db_errors
    @log_database_operation("get_relation")
    def get(self, relation_id: int) -> Optional[EntityRelation]:
        """Retrieve a relation by its storage id."""
        return self._get_by_id(EntityRelation, relation_id)

    @handle_db_errors
    @log_database_operation("get_entity_id_for_address")
    def get_entity_id_for_address(self, address: HostAddress) -> Optional[int]:
        """
        Read only the entity id stored for a host address.

        Args:
            address: Host address to look up

        Returns:
            Entity id, or None if the host has no relation
        """
        return self.session.execute(
            select(EntityRelation.entityid)
            .where(EntityRelation.component == address.component)
            .where(EntityRelation.area == address.area)
            .where(EntityRelation.instanceid == address.instanceid)
            .order_by(EntityRelation.id)
            .limit(1)
        ).scalar_one_or_none()

    @handle_db_errors
    @log_database_operation("get_relations_for_entity")
    def get_relations_for_entity(self, entityid: int) -> List[EntityRelation]:
        """
        Retrieve every relation pointing at an entity.

        Args:
            entityid: Entity id

        Returns:
            Relations ordered by component, area, instanceid
        """
        return self._get_all(
            EntityRelation,
            order_by=["component", "area", "instanceid"],
            entityid=entityid,
        )

    @handle_db_errors
    @log_database_operation("count_distinct_entities")
    def count_distinct_entities(
        self, component: str, area: str, instanceids: Iterable[int]
    ) -> int:
        """
        Count distinct entity ids used by a set of hosts.

        Hosts without a relation are ignored, so an empty set or a set of
        unattached hosts yields 0.

        Args:
            component: Owning subsystem
            area: Area of the hosts
            instanceids: Host ids to inspect

        Returns:
            Number of distinct entity ids
        """
        ids = sorted(set(instanceids))
        if not ids:
            return 0

        return self.session.execute(
            select(func.count(distinct(EntityRelation.entityid)))
            .where(EntityRelation.component == component)
            .where(EntityRelation.area == area)
            .where(EntityRelation.instanceid.in_(ids))
        ).scalar_one()

    # =========================================================================
    # WRITE
    # =========================================================================

    @handle_db_errors
    @log_database_operation("insert_relation")
    def insert(
        self,
        address: HostAddress,
        entityid: int,
        timecreated: Optional[datetime] = None,
    ) -> int:
        """
        Create a new relation row.

        Args:
            address: Host address
            entityid: Entity to attach
            timecreated: Timestamp, defaults to now

        Returns:
            Storage id of the new relation

        Raises:
            StorageError: If the write fails (including a duplicate address)
        """
        relation = EntityRelation(
            component=address.component,
            area=address.area,
            instanceid=address.instanceid,
            entityid=entityid,
            timecreated=timecreated or utc_now(),
        )
        self.session.add(relation)
        self.session.flush()

        safe_logger(self.logger).log_debug(
            f"Inserted relation for {address}",
            {"relation_id": relation.id, "entityid": entityid},
        )
        return relation.id

    @handle_db_errors
    @log_database_operation("update_relation")
    def update(
        self,
        relation_id: int,
        entityid: int,
        timecreated: Optional[datetime] = None,
    ) -> None:
        """
        Overwrite entity id and timestamp of an existing relation.

        Args:
            relation_id: Storage id of the relation
            entityid: New entity id
            timecreated: New timestamp, defaults to now

        Raises:
            NotFoundError: If no relation with that id exists
        """
        relation = self._get_by_id(EntityRelation, relation_id)
        if relation is None:
            raise NotFoundError(f"No EntityRelation found with id: {relation_id}")

        relation.entityid = entityid
        relation.timecreated = timecreated or utc_now()
        self.session.flush()

    @handle_db_errors
    @log_database_operation("upsert_relation")
    def upsert(
        self,
        address: HostAddress,
        entityid: int,
        timecreated: Optional[datetime] = None,
    ) -> EntityRelation:
        """
        Insert or update the relation for a host address in one step.

        The insert runs in a savepoint. If a concurrent writer created the
        row first, the unique constraint rejects ours, the savepoint is
        rolled back and the winning row is updated instead.

        Args:
            address: Host address
            entityid: Entity to attach
            timecreated: Timestamp, defaults to now

        Returns:
            The stored relation (same id as before when it already existed)

        Raises:
            StorageError: If neither insert nor update can be performed
        """
        timecreated = timecreated or utc_now()

        def _do_upsert() -> EntityRelation:
            existing = self._query_address(address).order_by(EntityRelation.id).first()
            if existing is not None:
                existing.entityid = entityid
                existing.timecreated = timecreated
                self.session.flush()
                return existing

            try:
                with self._savepoint():
                    relation = EntityRelation(
                        component=address.component,
                        area=address.area,
                        instanceid=address.instanceid,
                        entityid=entityid,
                        timecreated=timecreated,
                    )
                    self.session.add(relation)
                    self.session.flush()
                return relation
            except IntegrityError as e:
                winner = self._query_address(address).first()
                if winner is None:
                    raise StorageError(
                        f"Could not store relation for {address}: {e.orig}"
                    ) from e
                safe_logger(self.logger).log_warning(
                    f"Lost insert race for {address}, updating existing row",
                    {"relation_id": winner.id},
                )
                winner.entityid = entityid
                winner.timecreated = timecreated
                self.session.flush()
                return winner

        return self._execute_with_retry(_do_upsert)

    @handle_db_errors
    @log_database_operation("delete_relation_by_address")
    def delete_by_address(self, address: HostAddress) -> bool:
        """
        Remove the relation stored for a host address.

        Idempotent: deleting an address without a relation is not an error.

        Args:
            address: Host address

        Returns:
            True if a row was removed, False if there was nothing to delete
        """
        relations = self._query_address(address).all()
        for relation in relations:
            self.session.delete(relation)
        self.session.flush()
        return bool(relations)

    @log_database_operation("delete_relations_by_addresses")
    def delete_by_addresses(
        self, component: str, area: str, instanceids: Iterable[int]
    ) -> BulkDeleteResult:
        """
        Remove relations for many hosts of the same area.

        Each delete runs in its own savepoint. A failing delete is logged
        and recorded, the remaining ids are still processed, and nothing
        already deleted is rolled back.

        Args:
            component: Owning subsystem
            area: Area of the hosts
            instanceids: Host ids to clear

        Returns:
            BulkDeleteResult with the number removed and the failed ids
        """
        result = BulkDeleteResult()

        for instanceid in sorted(set(instanceids)):
            address = HostAddress(component, area, instanceid)
            try:
                with self._savepoint():
                    if self.delete_by_address(address):
                        result.deleted += 1
            except (StorageError, SQLAlchemyError) as e:
                safe_logger(self.logger).log_error(
                    e, {"operation": "bulk_delete_relation", "address": str(address)}
                )
                result.failed_ids.append(instanceid)

        return result
