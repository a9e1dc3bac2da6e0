#!/usr/bin/env python3
"""
fields.py
---------
Typed view of the entity fields a form submission carries.

Form adapters exchange flat mappings whose keys follow a prefix + row index
convention. Each row index (0-based) maps to four fields:

    entities_entityid_<i>     selected entity id ("" = none, -1 = cleared)
    entities_entityarea_<i>   area tag of the row, carried through
    entities_relationid_<i>   storage id of the existing relation
    entities_entityname_<i>   cached display name, never authoritative

EntityFieldSet parses such a mapping into ordered EntityFieldRow values so
the handler works with typed optionals instead of "key not in dict":

    row(i) is None           no entityid field for row i was submitted
    row(i).entity_id is None the field was submitted empty
    row(i).entity_id == -1   the field explicitly clears the relation
"""
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

from entrel.core.exceptions import ValidationError
from entrel.core.validators import DataValidator


ENTITYID_PREFIX = "entities_entityid_"
ENTITYAREA_PREFIX = "entities_entityarea_"
RELATIONID_PREFIX = "entities_relationid_"
ENTITYNAME_PREFIX = "entities_entityname_"

FIELD_PREFIXES = (
    ENTITYID_PREFIX,
    ENTITYAREA_PREFIX,
    RELATIONID_PREFIX,
    ENTITYNAME_PREFIX,
)

# "Explicitly no entity", distinct from an empty field
SENTINEL_NONE = -1

_FIELD_PATTERN = re.compile(
    r"^(" + "|".join(re.escape(p) for p in FIELD_PREFIXES) + r")(\d+)$"
)


def entityid_field(index: int) -> str:
    return f"{ENTITYID_PREFIX}{index}"


def entityarea_field(index: int) -> str:
    return f"{ENTITYAREA_PREFIX}{index}"


def relationid_field(index: int) -> str:
    return f"{RELATIONID_PREFIX}{index}"


def entityname_field(index: int) -> str:
    return f"{ENTITYNAME_PREFIX}{index}"


@dataclass
class EntityFieldRow:
    """
    One row of entity fields.

    Attributes:
        entity_id: Selected entity, None when empty, -1 when cleared
        area_tag: Area tag carried with the row
        relation_id: Existing relation's storage id, if round-tripped
        display_name: Cached entity name for display
        error: Why the entity id could not be read (lenient parsing only)
    """

    entity_id: Optional[int] = None
    area_tag: Optional[str] = None
    relation_id: Optional[int] = None
    display_name: Optional[str] = None
    error: Optional[str] = None

    @property
    def is_cleared(self) -> bool:
        """True when the row asks to drop the relation (empty or -1)."""
        return self.entity_id is None or self.entity_id == SENTINEL_NONE


@dataclass
class EntityFieldSet:
    """
    All entity rows of a submission, addressed by row index.

    Attributes:
        rows: Rows whose entityid field was present, keyed by index
        has_any_fields: Whether any of the four prefixed fields was present
    """

    rows: Dict[int, EntityFieldRow] = field(default_factory=dict)
    has_any_fields: bool = False

    @classmethod
    def from_form(
        cls, data: Mapping[str, Any], strict: bool = True
    ) -> "EntityFieldSet":
        """
        Parse a flat form mapping.

        Keys that do not follow the prefix + index convention are ignored.
        With ``strict=False`` an unreadable entity id does not raise; the
        row is kept with ``entity_id=None`` and the message in ``error``.

        Args:
            data: Submitted form values
            strict: Raise on an unreadable entity id

        Returns:
            EntityFieldSet

        Raises:
            ValidationError: If strict and an entityid field holds a
                non-integer value
        """
        raw: Dict[int, Dict[str, Any]] = {}
        has_any = False

        for key, value in data.items():
            match = _FIELD_PATTERN.match(str(key))
            if not match:
                continue
            has_any = True
            prefix, index = match.group(1), int(match.group(2))
            raw.setdefault(index, {})[prefix] = value

        rows = {}
        for index, values in raw.items():
            if ENTITYID_PREFIX not in values:
                continue
            entity_id, error = None, None
            try:
                entity_id = DataValidator.normalize_entity_id(values[ENTITYID_PREFIX])
            except ValidationError as e:
                if strict:
                    raise
                error = str(e)

            rows[index] = EntityFieldRow(
                entity_id=entity_id,
                area_tag=DataValidator.normalize_string(values.get(ENTITYAREA_PREFIX)),
                relation_id=DataValidator.normalize_int(values.get(RELATIONID_PREFIX)) or None,
                display_name=DataValidator.normalize_string(values.get(ENTITYNAME_PREFIX)),
                error=error,
            )

        return cls(rows=rows, has_any_fields=has_any)

    @classmethod
    def single(cls, entity_id: Any, index: int = 0) -> "EntityFieldSet":
        """Field set holding one row with only an entity id."""
        row = EntityFieldRow(entity_id=DataValidator.normalize_entity_id(entity_id))
        return cls(rows={index: row}, has_any_fields=True)

    @property
    def has_entity_fields(self) -> bool:
        """Whether any entityid field was submitted, whatever its value."""
        return bool(self.rows)

    def row(self, index: int) -> Optional[EntityFieldRow]:
        """The row at ``index``, or None if its entityid field is absent."""
        return self.rows.get(index)

    def __iter__(self) -> Iterator[Tuple[int, EntityFieldRow]]:
        """Iterate (index, row) pairs in index order."""
        return iter(sorted(self.rows.items()))

    def __len__(self) -> int:
        return len(self.rows)

    def to_form(self) -> Dict[str, Any]:
        """
        Flatten back into prefixed form fields.

        Empty values are written as 0 / "" the way form widgets expect.
        """
        data: Dict[str, Any] = {}
        for index, row in self:
            data[entityid_field(index)] = row.entity_id or 0
            if row.area_tag is not None:
                data[entityarea_field(index)] = row.area_tag
            data[relationid_field(index)] = row.relation_id or 0
            data[entityname_field(index)] = row.display_name or ""
        return data


def as_field_set(data: Any, strict: bool = True) -> EntityFieldSet:
    """Accept either an EntityFieldSet or a flat form mapping."""
    if isinstance(data, EntityFieldSet):
        return data
    return EntityFieldSet.from_form(data or {}, strict=strict)
