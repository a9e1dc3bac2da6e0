#!/usr/bin/env python3
"""
entity_manager.py
--------------------
Manages Entity and EntityAddress records.

For the relation core this is a read-mostly repository: it resolves entity
ids to names for display, lists top-level entities for selection lists,
and serves the helper lookups used by pricing and reporting code. Create
helpers exist for seeding and the CLI.

Usage:
    ent_mgr = EntityManager(session, logger)

    building = ent_mgr.create({"name": "Main Building", "shortname": "MB"})
    room = ent_mgr.create({"name": "Room 1", "parentid": building.id})
    ent_mgr.add_address(building, {"city": "Vienna", "streetname": "Ring"})

    ent_mgr.list_top_level()          # [building]
    ent_mgr.get_pricefactor(room.id)  # 1.0
    ent_mgr.get_pricefactor(999)      # None
"""
from typing import Any, Dict, List, Optional

from entrel.core.exceptions import NotFoundError, ValidationError
from entrel.core.validators import DataValidator
from entrel.database.decorators import (
    handle_db_errors,
    log_database_operation,
    validate_metadata,
)
from entrel.database.models import Entity, EntityAddress
from .base_manager import BaseManager


ADDRESS_FIELDS = (
    "country",
    "city",
    "postcode",
    "streetname",
    "streetnumber",
    "maplink",
    "mapembed",
)


class EntityManager(BaseManager):
    """
    Entity repository: lookups by id, name, shortname and parent chain.
    """

    # =========================================================================
    # LOOKUPS
    # =========================================================================

    @handle_db_errors
    @log_database_operation("get_entity")
    def get(self, entity_id: int) -> Optional[Entity]:
        """
        Retrieve an entity by id.

        Returns:
            Entity if found, None otherwise
        """
        return self._get_by_id(Entity, entity_id)

    def load(self, entity_id: int) -> Entity:
        """
        Retrieve an entity that must exist.

        Args:
            entity_id: The entity id

        Returns:
            Entity object

        Raises:
            NotFoundError: If no entity has that id
        """
        entity = self.get(entity_id)
        if entity is None:
            raise NotFoundError(f"No Entity found with id: {entity_id}")
        return entity

    def get_parent(self, entity: Entity) -> Optional[Entity]:
        """Follow ``parentid`` one level up; None for top-level entities."""
        if entity.parentid is None:
            return None
        return self.get(entity.parentid)

    @handle_db_errors
    @log_database_operation("list_top_level_entities")
    def list_top_level(self) -> List[Entity]:
        """
        List entities without a parent, for selection lists.

        Returns:
            Top-level entities ordered by sortorder, then name
        """
        return self._get_all(
            Entity, order_by=["sortorder", "name", "id"], parentid=None
        )

    @handle_db_errors
    @log_database_operation("get_entities_by_name")
    def get_by_name(self, name: str) -> List[Entity]:
        """
        Find all entities with exactly this name, ignoring case.

        Args:
            name: Entity name

        Returns:
            Matching entities (empty list when none match)
        """
        return self._get_by_field(Entity, "name", name, case_insensitive=True)

    @handle_db_errors
    @log_database_operation("get_entities_by_shortname")
    def get_by_shortname(self, shortname: str) -> List[Entity]:
        """
        Find all entities with exactly this shortname.

        Args:
            shortname: Entity shortname

        Returns:
            Matching entities (empty list when none match)
        """
        return self._get_by_field(Entity, "shortname", shortname)

    @handle_db_errors
    @log_database_operation("get_entity_with_addresses")
    def get_with_addresses(self, entity_id: int) -> List[Dict[str, Any]]:
        """
        Flat display projections of an entity joined with its addresses.

        One projection per address; an entity without addresses yields a
        single projection whose address fields are None.

        Args:
            entity_id: The entity id

        Returns:
            List of dictionaries, empty when the entity does not exist
        """
        entity = self._get_by_id(Entity, entity_id)
        if entity is None:
            return []

        base = {
            "id": entity.id,
            "name": entity.name,
            "shortname": entity.shortname,
            "description": entity.description,
            "timecreated": entity.timecreated,
            "timemodified": entity.timemodified,
            "status": entity.status,
            "createdby": entity.createdby,
            "parentid": entity.parentid,
            "parentname": entity.parentname,
            "sortorder": entity.sortorder,
            "openinghours": entity.openinghours,
            "maxallocation": entity.maxallocation,
            "pricefactor": entity.pricefactor,
        }

        if not entity.addresses:
            return [{**base, "addressid": None, **{f: None for f in ADDRESS_FIELDS}}]

        return [
            {
                **base,
                "addressid": address.id,
                **{f: getattr(address, f) for f in ADDRESS_FIELDS},
            }
            for address in entity.addresses
        ]

    @handle_db_errors
    @log_database_operation("get_pricefactor")
    def get_pricefactor(self, entity_id: int) -> Optional[float]:
        """
        Price factor of an entity for automatic price calculation.

        Args:
            entity_id: The entity id

        Returns:
            The stored factor, or None when the entity does not exist
        """
        entity = self._get_by_id(Entity, entity_id)
        return entity.pricefactor if entity is not None else None

    # =========================================================================
    # CREATE
    # =========================================================================

    @handle_db_errors
    @log_database_operation("create_entity")
    @validate_metadata(["name"])
    def create(self, metadata: Dict[str, Any]) -> Entity:
        """
        Create a new entity.

        Args:
            metadata: Dictionary with required key:
                - name: Display name
                Optional keys:
                - shortname, description, openinghours
                - parentid: Id of an existing entity
                - pricefactor: Float multiplier (default 1.0)
                - status, createdby, sortorder, maxallocation: integers

        Returns:
            Created Entity object

        Raises:
            ValidationError: If name is empty or the parent does not exist
        """
        name = DataValidator.normalize_string(metadata.get("name"))
        if not name:
            raise ValidationError(f"Invalid entity name: {metadata.get('name')}")

        parentid = DataValidator.normalize_int(metadata.get("parentid")) or None
        if parentid is not None and self._get_by_id(Entity, parentid) is None:
            raise ValidationError(f"Parent entity does not exist: {parentid}")

        pricefactor = DataValidator.normalize_float(metadata.get("pricefactor"))

        entity = Entity(
            name=name,
            shortname=DataValidator.normalize_string(metadata.get("shortname")),
            description=metadata.get("description"),
            parentid=parentid,
            pricefactor=pricefactor if pricefactor is not None else 1.0,
            openinghours=metadata.get("openinghours"),
            status=DataValidator.normalize_int(metadata.get("status")) or 0,
            createdby=DataValidator.normalize_int(metadata.get("createdby")) or 0,
            sortorder=DataValidator.normalize_int(metadata.get("sortorder")) or 0,
            maxallocation=DataValidator.normalize_int(metadata.get("maxallocation")) or 0,
        )
        self.session.add(entity)
        self.session.flush()

        if self.logger:
            self.logger.log_debug(f"Created entity: {name}", {"entity_id": entity.id})

        return entity

    @handle_db_errors
    @log_database_operation("add_entity_address")
    def add_address(self, entity: Entity, metadata: Dict[str, Any]) -> EntityAddress:
        """
        Attach an address to an entity.

        Args:
            entity: Persisted entity
            metadata: Any of country, city, postcode, streetname,
                streetnumber, maplink, mapembed

        Returns:
            Created EntityAddress
        """
        address = EntityAddress(
            entityidto=entity.id,
            **{f: DataValidator.normalize_string(metadata.get(f)) for f in ADDRESS_FIELDS},
        )
        entity.addresses.append(address)
        self.session.flush()
        return address
