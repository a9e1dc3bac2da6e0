#!/usr/bin/env python3
"""
conflicts.py
------------
Contract between the relation handler and the availability checker.

The checker decides whether attaching an entity to a host for a set of
date ranges would double-book the entity or fall outside its opening
hours. Its algorithm lives outside entrel; this module only fixes the
shapes exchanged with it and renders conflicts for humans.

Usage:
    class BookingConflictChecker:
        def check(self, entity_id, date_ranges, host_id, area) -> ConflictReport:
            ...

    handler = RelationHandler(..., conflict_checker=BookingConflictChecker())
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Protocol, Sequence


@dataclass(frozen=True)
class DateRange:
    """
    A candidate booking period.

    Attributes:
        starttime: Start of the period
        endtime: End of the period
        itemid: Id of the already-stored date this range represents,
            0 for a date that is not stored yet
    """

    starttime: datetime
    endtime: datetime
    itemid: int = 0


@dataclass(frozen=True)
class Conflict:
    """
    A host that already uses the entity during an overlapping period.

    Attributes:
        name: Display name of the conflicting host
        link: URL of the conflicting host
        starttime: Start of the conflicting booking
        endtime: End of the conflicting booking
    """

    name: str
    link: str
    starttime: datetime
    endtime: datetime


@dataclass
class ConflictReport:
    """
    Result of one availability check.

    Attributes:
        conflicts: Overlapping bookings of the entity
        openinghours: True when a range lies outside the opening hours
    """

    conflicts: List[Conflict] = field(default_factory=list)
    openinghours: bool = False

    @property
    def is_clear(self) -> bool:
        return not self.conflicts and not self.openinghours


class ConflictChecker(Protocol):
    """Availability checker for an entity over a set of date ranges."""

    def check(
        self,
        entity_id: int,
        date_ranges: Sequence[DateRange],
        host_id: int,
        area: str,
    ) -> ConflictReport:
        """
        Find bookings that clash with attaching ``entity_id``.

        ``host_id`` is the host's stored id (0 for a new host) so its own
        earlier booking is never reported as a conflict. ``area`` tells
        whether the host is an option or a single option date.
        """
        ...


class NoConflictChecker:
    """ConflictChecker that never reports anything."""

    def check(
        self,
        entity_id: int,
        date_ranges: Sequence[DateRange],
        host_id: int,
        area: str,
    ) -> ConflictReport:
        return ConflictReport()


def format_date_range(start: datetime, end: datetime) -> str:
    """
    Render a period for error messages.

    Examples:
        >>> format_date_range(datetime(2024, 1, 15, 10), datetime(2024, 1, 15, 12))
        '15 January 2024, 10:00–12:00'
        >>> format_date_range(datetime(2024, 1, 15, 10), datetime(2024, 1, 16, 12))
        '15 January 2024, 10:00 – 16 January 2024, 12:00'
    """
    start_day = f"{start.day} {start:%B %Y}"
    if start.date() == end.date():
        return f"{start_day}, {start:%H:%M}–{end:%H:%M}"
    end_day = f"{end.day} {end:%B %Y}"
    return f"{start_day}, {start:%H:%M} – {end_day}, {end:%H:%M}"
