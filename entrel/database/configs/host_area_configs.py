#!/usr/bin/env python3
"""
host_area_configs.py
---------------------

Declarative registry of the host areas relation handlers may serve.

Each (component, area) pair names where its host objects live so the
handler can enumerate the hosts under a parent:

    mod_booking/option      rows of booking_options, parent column bookingid
    mod_booking/optiondate  rows of booking_optiondates, parent column optionid

A parent area can also name its sub-instance area ("option" →
"optiondate"), which the divergence check needs.

The registry is closed: building a handler for an unregistered pair is an
InvalidArgumentError. Deployments extend it from a YAML file:

    areas:
      - component: mod_booking
        area: option
        table: booking_options
        parent_column: bookingid
        sub_area: optiondate
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

import yaml

from entrel.core.exceptions import InvalidArgumentError, ValidationError


@dataclass(frozen=True)
class HostAreaConfig:
    """
    Configuration for one kind of host object.

    Attributes:
        component: Owning subsystem tag
        area: Area tag within the component
        table: Table holding the host rows (id column is ``id``)
        parent_column: Column in ``table`` referencing the parent host
        sub_area: Area of the sub-instances below this host, if any
    """

    component: str
    area: str
    table: str
    parent_column: str
    sub_area: Optional[str] = None

    @property
    def key(self) -> Tuple[str, str]:
        return (self.component, self.area)


DEFAULT_HOST_AREAS: List[HostAreaConfig] = [
    HostAreaConfig(
        component="mod_booking",
        area="option",
        table="booking_options",
        parent_column="bookingid",
        sub_area="optiondate",
    ),
    HostAreaConfig(
        component="mod_booking",
        area="optiondate",
        table="booking_optiondates",
        parent_column="optionid",
    ),
]


class HostAreaRegistry:
    """Lookup of HostAreaConfig by (component, area)."""

    def __init__(self, configs: Iterable[HostAreaConfig] = ()) -> None:
        self._configs: Dict[Tuple[str, str], HostAreaConfig] = {}
        for config in configs:
            self.register(config)

    def register(self, config: HostAreaConfig) -> None:
        """Add or replace the configuration for a (component, area) pair."""
        self._configs[config.key] = config

    def get(self, component: str, area: str) -> HostAreaConfig:
        """
        Configuration for a pair.

        Raises:
            InvalidArgumentError: If the pair is not registered
        """
        try:
            return self._configs[(component, area)]
        except KeyError:
            raise InvalidArgumentError(f"Unknown host area: {component}/{area}")

    def __contains__(self, key: Tuple[str, str]) -> bool:
        return key in self._configs

    def __iter__(self):
        return iter(sorted(self._configs.values(), key=lambda c: c.key))

    def __len__(self) -> int:
        return len(self._configs)


def default_registry() -> HostAreaRegistry:
    """Registry holding the built-in booking areas."""
    return HostAreaRegistry(DEFAULT_HOST_AREAS)


def load_host_area_configs(
    path: Union[str, Path], registry: Optional[HostAreaRegistry] = None
) -> HostAreaRegistry:
    """
    Extend a registry with the areas defined in a YAML file.

    Args:
        path: YAML file with a top-level ``areas`` list
        registry: Registry to extend (default: the built-in areas)

    Returns:
        The extended registry

    Raises:
        ValidationError: If the file is malformed
    """
    if registry is None:
        registry = default_registry()
    path = Path(path)

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ValidationError(f"Cannot read host area config {path}: {e}") from e

    areas = data.get("areas") if isinstance(data, dict) else None
    if not isinstance(areas, list):
        raise ValidationError(f"Host area config {path} needs an 'areas' list")

    for position, item in enumerate(areas):
        if not isinstance(item, dict):
            raise ValidationError(f"Area config entry {position} is not a mapping")
        for required in ("component", "area", "table", "parent_column"):
            if not item.get(required):
                raise ValidationError(
                    f"Area config entry {position} is missing '{required}'"
                )
        registry.register(
            HostAreaConfig(
                component=str(item["component"]),
                area=str(item["area"]),
                table=str(item["table"]),
                parent_column=str(item["parent_column"]),
                sub_area=item.get("sub_area"),
            )
        )

    return registry
