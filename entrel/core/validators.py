#!/usr/bin/env python3
"""
validators.py
--------------------
Data validation and normalization utilities.

Form adapters hand values over as loosely-typed strings ("", "0", "-1",
"  12 "); these helpers turn them into the Python types the managers and
the relation handler work with.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from .exceptions import ValidationError


class DataValidator:
    """Centralized data validation for database and form operations."""

    @staticmethod
    def validate_required_fields(
        data: Dict[str, Any], required_fields: List[str]
    ) -> None:
        """
        Validate that required fields are present and non-empty.

        Args:
            data: Data dictionary to validate
            required_fields: List of required field names

        Raises:
            ValidationError: If validation fails
        """
        for field in required_fields:
            if field not in data or not data[field]:
                raise ValidationError(f"Required field '{field}' missing or empty")

    @staticmethod
    def normalize_string(value: Any) -> Optional[str]:
        """
        Normalize string value: strip and collapse internal whitespace.

        Args:
            value: Value to normalize

        Returns:
            Normalized string or None when empty
        """
        if value is None:
            return None
        normalized = " ".join(str(value).split())
        return normalized or None

    @staticmethod
    def normalize_int(value: Any) -> Optional[int]:
        """
        Convert value to integer safely.

        Args:
            value: Value to convert (int, float, numeric string)

        Returns:
            Integer value or None if not convertible
        """
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            return int(value)
        text = str(value).strip()
        if not text:
            return None
        try:
            return int(float(text))
        except ValueError:
            return None

    @staticmethod
    def normalize_float(value: Any) -> Optional[float]:
        """
        Convert value to float safely.

        Args:
            value: Value to convert

        Returns:
            Float value or None
        """
        if value is None or isinstance(value, bool):
            return None
        try:
            return float(str(value).strip())
        except ValueError:
            return None

    @staticmethod
    def normalize_entity_id(value: Any) -> Optional[int]:
        """
        Normalize a submitted entity id.

        Empty values ("", None, 0, "0") collapse to None. The sentinel -1
        is preserved so callers can tell "explicitly none" from "empty".

        Args:
            value: Raw form value

        Returns:
            Positive entity id, -1, or None

        Raises:
            ValidationError: If the value is not an integer
        """
        if value is None:
            return None
        if isinstance(value, bool):
            raise ValidationError(f"Invalid entity id: {value!r}")
        if isinstance(value, float):
            if not value.is_integer():
                raise ValidationError(f"Invalid entity id: {value!r}")
            value = int(value)
        if isinstance(value, int):
            entity_id = value
        else:
            text = str(value).strip()
            if not text:
                return None
            # ids are integral; "5.9" or "1e3" must not land on another entity
            try:
                entity_id = int(text)
            except ValueError:
                raise ValidationError(f"Invalid entity id: {value!r}") from None
        if entity_id == 0:
            return None
        if entity_id < -1:
            raise ValidationError(f"Invalid entity id: {value!r}")
        return entity_id
