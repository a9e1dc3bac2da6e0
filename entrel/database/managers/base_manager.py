#!/usr/bin/env python3
"""
base_manager.py
--------------------
Base manager providing common query helpers and utilities.
All entrel managers inherit from this class.

Key Features:
    - Retry logic for database lock handling
    - Generic lookups by id, by field and listing with ordering
    - Savepoint helper for writes that must not poison the outer session

Usage:
    Subclass BaseManager for each store and implement the store contract
    on top of these helpers:

    class EntityManager(BaseManager):
        def get(self, entity_id: int) -> Optional[Entity]:
            return self._get_by_id(Entity, entity_id)
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import time
from abc import ABC
from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Optional, Protocol, Type, TypeVar

# --- Third party imports ---
from sqlalchemy import func
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Mapped, Session, SessionTransaction

# --- Local imports ---
from entrel.core.exceptions import StorageError
from entrel.core.logging_manager import EntrelLogger, safe_logger


class HasId(Protocol):
    """Protocol for objects that have an id attribute."""

    id: Mapped[int]


T = TypeVar("T", bound=HasId)


class BaseManager(ABC):
    """
    Abstract base manager providing common query helpers.

    Attributes:
        session: SQLAlchemy session for database operations
        logger: Optional logger for operation tracking
    """

    def __init__(self, session: Session, logger: Optional[EntrelLogger] = None):
        """
        Initialize the base manager.

        Args:
            session: SQLAlchemy session
            logger: Optional logger for operation tracking
        """
        self.session = session
        self.logger = logger

    # -------------------------------------------------------------------------
    # Core Helper Methods
    # -------------------------------------------------------------------------

    def _execute_with_retry(
        self,
        operation: Callable[[], Any],
        max_retries: int = 3,
        retry_delay: float = 0.1,
    ) -> Any:
        """
        Execute database operation with retry on lock.

        Args:
            operation: Callable that performs the operation
            max_retries: Maximum number of attempts
            retry_delay: Base delay between retries (exponential backoff)

        Returns:
            Result of the operation

        Raises:
            OperationalError: If the error is not a lock or retries are exhausted
            StorageError: If the retry loop completes without success
        """
        for attempt in range(max_retries):
            try:
                return operation()
            except OperationalError as e:
                error_msg = str(e).lower()

                if (
                    "locked" in error_msg or "busy" in error_msg
                ) and attempt < max_retries - 1:
                    wait_time = retry_delay * (2**attempt)

                    safe_logger(self.logger).log_debug(
                        f"Database locked, retrying in {wait_time}s",
                        {"attempt": attempt + 1, "max_retries": max_retries},
                    )

                    time.sleep(wait_time)
                    continue

                raise

        raise StorageError("Retry loop completed without success")

    @contextmanager
    def _savepoint(self) -> Iterator[SessionTransaction]:
        """
        Run a block inside a SAVEPOINT.

        A failure inside the block rolls back only the savepoint, leaving
        earlier work in the session intact; the exception still propagates.
        """
        with self.session.begin_nested() as savepoint:
            yield savepoint

    # -------------------------------------------------------------------------
    # Generic Query Helpers
    # -------------------------------------------------------------------------

    def _get_by_id(self, model_class: Type[T], entity_id: int) -> Optional[T]:
        """
        Get a row by primary key.

        Args:
            model_class: ORM model class
            entity_id: The primary key

        Returns:
            Row if found, None otherwise
        """
        if not entity_id:
            return None
        return self.session.get(model_class, entity_id)

    def _get_by_field(
        self,
        model_class: Type[T],
        field_name: str,
        value: Any,
        case_insensitive: bool = False,
    ) -> List[T]:
        """
        Get all rows whose field equals a value.

        Args:
            model_class: ORM model class
            field_name: Field name to filter by
            value: Value to look up
            case_insensitive: Compare lower-cased strings

        Returns:
            Matching rows ordered by id (empty list when none match)
        """
        if value is None:
            return []

        column = getattr(model_class, field_name)
        query = self.session.query(model_class)
        if case_insensitive and isinstance(value, str):
            query = query.filter(func.lower(column) == value.lower())
        else:
            query = query.filter(column == value)

        return query.order_by(model_class.id).all()

    def _get_all(
        self,
        model_class: Type[T],
        order_by: Optional[List[str]] = None,
        **filters: Any,
    ) -> List[T]:
        """
        Get all rows of a type with optional filtering and ordering.

        Args:
            model_class: ORM model class
            order_by: Field names to order by, in priority order
            **filters: Equality filter conditions

        Returns:
            List of rows
        """
        query = self.session.query(model_class)

        if filters:
            query = query.filter_by(**filters)

        for field_name in order_by or []:
            if hasattr(model_class, field_name):
                query = query.order_by(getattr(model_class, field_name))

        return query.all()
