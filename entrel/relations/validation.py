#!/usr/bin/env python3
"""
validation.py
-------------
Field-keyed validation messages.

Conflicts found while validating a submission are soft errors: they are
collected here and returned to the form adapter so it can re-render and
ask the user to pick another entity or other dates. Nothing is raised.
"""
from dataclasses import dataclass, field
from typing import Dict, List

from .conflicts import ConflictReport, format_date_range


CONFLICT_HEADER = "The entity is already booked at the following dates:"
OPENING_HOURS_MESSAGE = "The dates are not within the opening hours of the entity."


def conflict_messages(report: ConflictReport) -> List[str]:
    """
    Human-readable messages for a conflict report.

    Date conflicts become one combined message listing each conflicting
    host with its link and period; an opening-hours violation adds a
    second message.
    """
    messages = []
    if report.conflicts:
        lines = [CONFLICT_HEADER]
        for conflict in report.conflicts:
            period = format_date_range(conflict.starttime, conflict.endtime)
            lines.append(f"- {conflict.name} ({period}): {conflict.link}")
        messages.append("\n".join(lines))
    if report.openinghours:
        messages.append(OPENING_HOURS_MESSAGE)
    return messages


@dataclass
class ValidationResult:
    """
    Validation messages keyed by form field name.

    Attributes:
        errors: Field name → combined message
    """

    errors: Dict[str, str] = field(default_factory=dict)

    def add(self, field_name: str, message: str) -> None:
        """Append a message to a field, keeping earlier ones."""
        if field_name in self.errors:
            self.errors[field_name] = f"{self.errors[field_name]}\n{message}"
        else:
            self.errors[field_name] = message

    def extend(self, field_name: str, messages: List[str]) -> None:
        for message in messages:
            self.add(field_name, message)

    @property
    def is_valid(self) -> bool:
        return not self.errors
