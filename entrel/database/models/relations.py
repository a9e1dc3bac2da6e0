"""
Relation Models
---------------

The polymorphic association between one host object and one entity.

Models:
    - HostAddress: Value type for the (component, area, instanceid) key
    - EntityRelation: Persisted relation row

A host object lives in another subsystem and is addressed by a tagged
composite key instead of a foreign key:

    component   owning subsystem        e.g. "mod_booking"
    area        sub-context within it   e.g. "option", "optiondate"
    instanceid  subsystem-local id      e.g. 42

At most one relation exists per address. The application enforces this
with find-before-write; the table backs it with a unique constraint.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, UTCDateTime, utc_now

if TYPE_CHECKING:
    from .entities import Entity


@dataclass(frozen=True)
class HostAddress:
    """
    Composite address of a host object.

    Attributes:
        component: Owning subsystem tag
        area: Sub-context tag within the component
        instanceid: The subsystem's local identifier
    """

    component: str
    area: str
    instanceid: int

    def __str__(self) -> str:
        return f"{self.component}/{self.area}/{self.instanceid}"


class EntityRelation(Base):
    """
    Association of one host object with one entity.

    Attributes:
        id: Primary key, stable across reassignments
        component: Owning subsystem of the host
        area: Sub-context of the host
        instanceid: Host id inside its subsystem
        entityid: The attached entity
        timecreated: Refreshed on every save, acts as "last modified"

    Relationships:
        entity: Many-to-one with Entity
    """

    __tablename__ = "entities_relations"
    __table_args__ = (
        UniqueConstraint(
            "component", "area", "instanceid", name="uq_entities_relations_address"
        ),
        Index("ix_entities_relations_area_entity", "area", "entityid"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    component: Mapped[str] = mapped_column(String(100), nullable=False)
    area: Mapped[str] = mapped_column(String(100), nullable=False)
    instanceid: Mapped[int] = mapped_column(Integer, nullable=False)
    entityid: Mapped[int] = mapped_column(
        ForeignKey("entities.id", ondelete="CASCADE"), nullable=False, index=True
    )
    timecreated: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utc_now
    )

    entity: Mapped["Entity"] = relationship("Entity", back_populates="relations")

    @property
    def address(self) -> HostAddress:
        """The host address this relation is stored under."""
        return HostAddress(self.component, self.area, self.instanceid)

    def __repr__(self) -> str:
        return (
            f"<EntityRelation(id={self.id}, address={self.address}, "
            f"entityid={self.entityid})>"
        )
