#!/usr/bin/env python3
"""
handler.py
----------
Relation lifecycle for one kind of host object.

A RelationHandler is bound to a fixed (component, area) pair, e.g.
("mod_booking", "option"), and serves every host of that kind; the host's
instance id is passed per call. It decides which relation should exist and
delegates all storage to the RelationManager.

Lifecycle of the relation for one host (see ``save``):

    no entity fields at all        → relation deleted
    row present, entity id empty   → relation deleted
    row present, entity id -1      → relation deleted
    row present, entity id N       → relation upserted (same row id kept)
    row for this index absent      → relation left untouched

Validation runs the conflict checker once per submitted row that carries
an entity id, and returns soft, field-keyed messages.

Usage:
    handler = RelationHandler(
        "mod_booking", "option",
        relations=RelationManager(session),
        entities=EntityManager(session),
        conflict_checker=checker,
        hierarchy=SqlHostHierarchy(session, registry),
    )

    result = handler.validate(form_data, date_ranges, host_id=option.id)
    if result.is_valid:
        handler.save(form_data, option.id)
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, MutableMapping, Optional, Sequence

from entrel.core.exceptions import (
    InvalidArgumentError,
    NotFoundError,
    PreconditionError,
)
from entrel.core.logging_manager import EntrelLogger, safe_logger
from entrel.database.configs import HostAreaRegistry, default_registry
from entrel.database.hierarchy import HostHierarchy
from entrel.database.managers import BulkDeleteResult, EntityManager, RelationManager
from entrel.database.models import HostAddress, utc_now

from .conflicts import ConflictChecker, DateRange, NoConflictChecker
from .fields import (
    SENTINEL_NONE,
    EntityFieldSet,
    as_field_set,
    entityid_field,
    entityname_field,
    relationid_field,
)
from .validation import ValidationResult, conflict_messages


@dataclass
class RelationView:
    """
    A host's current relation joined with its entity, for display.

    All fields keep their empty defaults when the host has no relation.
    """

    entity_id: int = 0
    relation_id: int = 0
    component: str = ""
    area: str = ""
    instanceid: int = 0
    name: str = ""
    shortname: str = ""
    parentid: Optional[int] = None
    parentname: str = ""
    timecreated: Optional[datetime] = None

    @property
    def is_empty(self) -> bool:
        return not self.relation_id


class RelationHandler:
    """
    Orchestrates validation, saving and cleanup of entity relations.

    Attributes:
        component: Owning subsystem of the hosts served
        area: Area of the hosts served
        config: Host area configuration of (component, area)
        relations: Relation store
        entities: Entity repository
        conflict_checker: Availability checker used by validate()
        hierarchy: Lookup of hosts under a parent, for cascades
        logger: Optional logger
    """

    def __init__(
        self,
        component: str,
        area: str,
        relations: RelationManager,
        entities: EntityManager,
        conflict_checker: Optional[ConflictChecker] = None,
        hierarchy: Optional[HostHierarchy] = None,
        registry: Optional[HostAreaRegistry] = None,
        logger: Optional[EntrelLogger] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """
        Bind a handler to a host kind.

        Raises:
            InvalidArgumentError: If (component, area) is not registered
        """
        if registry is None:
            registry = default_registry()
        self.config = registry.get(component, area)
        self.component = component
        self.area = area
        self.relations = relations
        self.entities = entities
        self.conflict_checker = conflict_checker or NoConflictChecker()
        self.hierarchy = hierarchy
        self.logger = logger
        self.clock = clock

    def address(self, instanceid: int) -> HostAddress:
        """Host address of an instance of this handler's kind."""
        return HostAddress(self.component, self.area, instanceid)

    # =========================================================================
    # READ
    # =========================================================================

    def load_for_host(self, instanceid: int) -> RelationView:
        """
        Current relation of a host joined with its entity.

        Args:
            instanceid: Host id

        Returns:
            RelationView, empty when the host has no relation
        """
        relation = self.relations.find_by_address(self.address(instanceid))
        if relation is None:
            return RelationView()

        entity = self.entities.get(relation.entityid)
        if entity is None:
            return RelationView()

        return RelationView(
            entity_id=entity.id,
            relation_id=relation.id,
            component=relation.component,
            area=relation.area,
            instanceid=relation.instanceid,
            name=entity.name,
            shortname=entity.shortname or "",
            parentid=entity.parentid,
            parentname=entity.parentname,
            timecreated=relation.timecreated,
        )

    def get_entity_id(self, instanceid: int) -> int:
        """Entity attached to a host, 0 when none."""
        return self.load_for_host(instanceid).entity_id

    def form_defaults(self, instanceid: int, index: int = 0) -> Dict[str, Any]:
        """
        Stored values for the prefixed form fields of one row.

        Args:
            instanceid: Host id (0 for a host not created yet)
            index: Row index

        Returns:
            Mapping of relationid/entityid/entityname field names to values
        """
        view = self.load_for_host(instanceid) if instanceid else RelationView()
        return {
            relationid_field(index): view.relation_id,
            entityid_field(index): view.entity_id,
            entityname_field(index): view.name,
        }

    def fill_form_defaults(
        self, data: MutableMapping[str, Any], instanceid: int, index: int = 0
    ) -> MutableMapping[str, Any]:
        """
        Fill a row's empty form fields from storage.

        Fields that already hold a value are kept, so re-displaying a
        submitted form does not overwrite what the user entered.

        Args:
            data: Form values, modified in place
            instanceid: Host id
            index: Row index

        Returns:
            The same mapping
        """
        for key, value in self.form_defaults(instanceid, index).items():
            if not data.get(key):
                data[key] = value
        return data

    @staticmethod
    def items_match(old: Dict[str, Any], new: Dict[str, Any]) -> bool:
        """
        Whether two relation items are equivalent for saving purposes.

        Items with no entity on both sides match. Otherwise entity id and
        area tag must both be equal.

        Args:
            old: Mapping with 'entityid' and 'entityarea'
            new: Mapping with 'entityid' and 'entityarea'
        """
        if not old.get("entityid") and not new.get("entityid"):
            return True
        return str(old.get("entityid")) == str(new.get("entityid")) and old.get(
            "entityarea"
        ) == new.get("entityarea")

    # =========================================================================
    # VALIDATION
    # =========================================================================

    def check_entity(
        self,
        entity_id: Optional[int],
        date_ranges: Sequence[DateRange],
        host_id: int = 0,
        area: Optional[str] = None,
    ) -> List[str]:
        """
        Conflict messages for attaching one entity.

        An empty candidate is never checked.

        Args:
            entity_id: Candidate entity id
            date_ranges: Periods the host would occupy the entity
            host_id: Stored id of the host, 0 if it is new
            area: Area passed to the checker (default: the handler's area)

        Returns:
            Messages, empty when the entity is available
        """
        if not entity_id or entity_id == SENTINEL_NONE:
            return []

        report = self.conflict_checker.check(
            entity_id, list(date_ranges), host_id or 0, area or self.area
        )
        messages = conflict_messages(report)

        if messages:
            safe_logger(self.logger).log_info(
                "Entity conflicts found",
                {
                    "entity_id": entity_id,
                    "host_id": host_id,
                    "area": area or self.area,
                    "conflicts": len(report.conflicts),
                    "openinghours": report.openinghours,
                },
            )
        return messages

    def validate(
        self,
        data: Any,
        date_ranges: Sequence[DateRange] = (),
        host_id: int = 0,
    ) -> ValidationResult:
        """
        Validate every entity row of a submission.

        Submissions without any entityid field are accepted immediately.
        A row whose entity id cannot be read gets that message and the
        remaining rows are still checked. Rows whose entity id is empty or
        -1 are skipped. Each remaining row is checked once against the
        handler's own area; its messages are keyed by the row's entityid
        field name.

        Args:
            data: Form mapping or EntityFieldSet
            date_ranges: Periods the host would occupy the entity
            host_id: Stored id of the host, 0 if it is new

        Returns:
            ValidationResult (never raises for bad input or conflicts)
        """
        result = ValidationResult()
        fields = as_field_set(data, strict=False)
        if not fields.has_entity_fields:
            return result

        for index, row in fields:
            if row.error:
                result.add(entityid_field(index), row.error)
                continue
            if row.is_cleared:
                continue
            result.extend(
                entityid_field(index),
                self.check_entity(row.entity_id, date_ranges, host_id, self.area),
            )

        return result

    # =========================================================================
    # SAVE / DELETE
    # =========================================================================

    def save(self, data: Any, instanceid: int, index: int = 0) -> Optional[int]:
        """
        Persist the relation of a host from submitted fields.

        Must run after the host itself has been stored.

        Args:
            data: Form mapping or EntityFieldSet
            instanceid: Stored id of the host
            index: Row of the submission describing this host

        Returns:
            The stored entity id, or None when the relation was deleted or
            left untouched

        Raises:
            PreconditionError: If instanceid is not set
            StorageError: If the write fails
        """
        if not instanceid:
            raise PreconditionError(
                "Host instance id must be set before saving its entity relation"
            )

        logger = safe_logger(self.logger)
        address = self.address(instanceid)
        fields = as_field_set(data)

        if not fields.has_any_fields:
            logger.log_debug(f"No entity fields submitted, clearing {address}")
            self.delete_for_host(instanceid)
            return None

        row = fields.row(index)
        if row is None:
            logger.log_debug(f"No entity field for row {index}, keeping {address}")
            return None

        if row.entity_id is None:
            logger.log_debug(f"Empty entity id, clearing {address}")
            self.delete_for_host(instanceid)
            return None

        if row.entity_id == SENTINEL_NONE:
            logger.log_debug(f"Entity explicitly removed, clearing {address}")
            self.delete_for_host(instanceid)
            return None

        relation = self.relations.upsert(address, row.entity_id, self.clock())
        logger.log_operation(
            "relation_saved",
            {
                "address": str(address),
                "relation_id": relation.id,
                "entityid": relation.entityid,
            },
        )
        return relation.entityid

    def save_simple(self, instanceid: int, entity_id: Any) -> Optional[int]:
        """
        Attach an entity to a host without a form.

        An empty entity id deletes the relation; -1 does too.

        Args:
            instanceid: Stored id of the host
            entity_id: Entity to attach

        Returns:
            The stored entity id, or None when the relation was deleted
        """
        if not entity_id:
            if not instanceid:
                raise PreconditionError(
                    "Host instance id must be set before saving its entity relation"
                )
            self.delete_for_host(instanceid)
            return None

        return self.save(EntityFieldSet.single(entity_id), instanceid, 0)

    def update_relation(self, relation_id: int, entity_id: int) -> None:
        """
        Reassign a relation addressed by its round-tripped storage id.

        Raises:
            NotFoundError: If the relation no longer exists
        """
        if self.relations.get(relation_id) is None:
            raise NotFoundError(f"No EntityRelation found with id: {relation_id}")
        self.relations.update(relation_id, entity_id, self.clock())

    def delete_for_host(self, instanceid: int) -> bool:
        """
        Remove the relation of a host of this handler's kind.

        Returns:
            True if a relation was removed
        """
        removed = self.relations.delete_by_address(self.address(instanceid))
        if removed:
            safe_logger(self.logger).log_operation(
                "relation_deleted", {"address": str(self.address(instanceid))}
            )
        return removed

    def delete_all_for_parent(self, parent_id: int) -> BulkDeleteResult:
        """
        Remove the relations of every host under a parent.

        For ("mod_booking", "option") the parent is a booking instance and
        every option of that booking loses its relation. Deletes run one
        host at a time; failures are collected, not rolled back.

        Args:
            parent_id: Id of the parent host

        Returns:
            BulkDeleteResult; ``success`` is False if any delete failed

        Raises:
            InvalidArgumentError: If parent_id is missing
            PreconditionError: If no host hierarchy is configured
        """
        if not parent_id:
            raise InvalidArgumentError(
                f"Could not clear {self.component}/{self.area} relations: "
                "missing parent id"
            )

        instanceids = self._hierarchy().child_ids(self.component, self.area, parent_id)
        result = self.relations.delete_by_addresses(
            self.component, self.area, instanceids
        )

        logger = safe_logger(self.logger)
        details = {
            "component": self.component,
            "area": self.area,
            "parent_id": parent_id,
            "hosts": len(instanceids),
            "deleted": result.deleted,
            "failed_ids": result.failed_ids,
        }
        if result.success:
            logger.log_operation("relations_deleted_for_parent", details)
        else:
            logger.log_warning("Some relations could not be deleted", details)
        return result

    # =========================================================================
    # DIVERGENCE
    # =========================================================================

    def has_divergent_sub_entities(self, parent_id: int) -> bool:
        """
        Whether the sub-instances of a host use different entities.

        Counts the distinct entities attached to the sub-instances (e.g.
        option dates) of a parent host (e.g. an option). Sub-instances
        without a relation are ignored. More than one distinct entity means
        a bulk reassignment from the parent would overwrite deliberate
        per-date choices.

        Args:
            parent_id: Id of a host of this handler's kind

        Returns:
            True iff more than one distinct entity is in use

        Raises:
            InvalidArgumentError: If this area has no sub-instance area
            PreconditionError: If no host hierarchy is configured
        """
        sub_area = self.config.sub_area
        if sub_area is None:
            raise InvalidArgumentError(
                f"{self.component}/{self.area} has no sub-instance area"
            )

        instanceids = self._hierarchy().child_ids(self.component, sub_area, parent_id)
        distinct = self.relations.count_distinct_entities(
            self.component, sub_area, instanceids
        )

        safe_logger(self.logger).log_debug(
            "Checked sub-instance entities",
            {"parent_id": parent_id, "sub_area": sub_area, "distinct": distinct},
        )
        return distinct > 1

    def _hierarchy(self) -> HostHierarchy:
        if self.hierarchy is None:
            raise PreconditionError(
                f"No host hierarchy configured for {self.component}/{self.area}"
            )
        return self.hierarchy
