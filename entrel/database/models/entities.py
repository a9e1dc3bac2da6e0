"""
Entity Models
-------------

Bookable resources and their addresses.

Models:
    - Entity: A room, location or piece of equipment
    - EntityAddress: Contact/location fields joined for display

Entities form a hierarchy through ``parentid`` (a building containing
rooms). The hierarchy is a weak reference: nothing here protects against
cycles or dangling parents.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin

if TYPE_CHECKING:
    from .relations import EntityRelation


class Entity(TimestampMixin, Base):
    """
    Represents a bookable resource.

    Attributes:
        id: Primary key
        name: Display name
        shortname: Short identifier used by imports and lookups
        description: Free text description
        parentid: Optional id of the enclosing entity
        pricefactor: Multiplier used by external pricing logic
        openinghours: Opaque schedule data, only read by conflict checkers
        status: Publication status flag
        createdby: Id of the creating user
        sortorder: Position in selection lists
        maxallocation: Maximum simultaneous allocations

    Relationships:
        parent: The enclosing Entity, if any
        children: Entities with this entity as parent
        addresses: One-to-many with EntityAddress
        relations: Host objects this entity is attached to
    """

    __tablename__ = "entities"

    # --- Primary fields ---
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    shortname: Mapped[Optional[str]] = mapped_column(String(255), index=True)
    description: Mapped[Optional[str]] = mapped_column(Text)
    parentid: Mapped[Optional[int]] = mapped_column(
        ForeignKey("entities.id", ondelete="SET NULL"), nullable=True, index=True
    )
    pricefactor: Mapped[float] = mapped_column(Float, nullable=False, default=1.0)
    openinghours: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    createdby: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    sortorder: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    maxallocation: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # --- Relationships ---
    parent: Mapped[Optional["Entity"]] = relationship(
        "Entity", remote_side=[id], back_populates="children"
    )
    children: Mapped[List["Entity"]] = relationship(
        "Entity", back_populates="parent"
    )
    addresses: Mapped[List["EntityAddress"]] = relationship(
        "EntityAddress",
        back_populates="entity",
        cascade="all, delete-orphan",
        order_by="EntityAddress.id",
    )
    relations: Mapped[List["EntityRelation"]] = relationship(
        "EntityRelation", back_populates="entity", passive_deletes=True
    )

    # --- Computed properties ---
    @property
    def parentname(self) -> str:
        """Name of the parent entity, empty when top level."""
        return self.parent.name if self.parent is not None else ""

    def __repr__(self) -> str:
        return f"<Entity(id={self.id}, name={self.name})>"

    def __str__(self) -> str:
        if self.parentname:
            return f"{self.name} ({self.parentname})"
        return self.name


class EntityAddress(Base):
    """
    Address of an entity.

    Only used for display projections; the relation core never reads it.
    """

    __tablename__ = "entities_address"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    entityidto: Mapped[int] = mapped_column(
        ForeignKey("entities.id", ondelete="CASCADE"), nullable=False, index=True
    )
    country: Mapped[Optional[str]] = mapped_column(String(255))
    city: Mapped[Optional[str]] = mapped_column(String(255))
    postcode: Mapped[Optional[str]] = mapped_column(String(64))
    streetname: Mapped[Optional[str]] = mapped_column(String(255))
    streetnumber: Mapped[Optional[str]] = mapped_column(String(64))
    maplink: Mapped[Optional[str]] = mapped_column(Text)
    mapembed: Mapped[Optional[str]] = mapped_column(Text)

    entity: Mapped["Entity"] = relationship("Entity", back_populates="addresses")

    def __repr__(self) -> str:
        return f"<EntityAddress(id={self.id}, entity={self.entityidto}, city={self.city})>"
