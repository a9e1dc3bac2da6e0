#!/usr/bin/env python3
"""
decorators.py
--------------------
Cross-cutting wrappers for store methods.

    @handle_db_errors                   SQLAlchemy failures -> StorageError
    @log_database_operation("name")     start / completed / failed entries
    @validate_metadata(["name"])        required keys of a create() payload

Stores stack them as ``@handle_db_errors`` over
``@log_database_operation(...)`` so a failure is logged with its timing
before it is translated.
"""
import time
from datetime import datetime
from functools import wraps
from typing import Callable, List

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from entrel.core.exceptions import StorageError
from entrel.core.logging_manager import safe_logger
from entrel.core.validators import DataValidator


def log_database_operation(operation_name: str):
    """
    Log a store call under ``operation_name``.

    Reads the store's ``logger`` attribute; a store built without one
    logs nothing.
    """

    def decorator(function: Callable) -> Callable:
        @wraps(function)
        def wrapper(self, *args, **kwargs):
            logger = safe_logger(getattr(self, "logger", None))
            operation_id = f"{operation_name}_{datetime.now():%Y%m%d_%H%M%S_%f}"
            started = time.perf_counter()

            logger.log_debug(
                f"Starting {operation_name}",
                {
                    "operation_id": operation_id,
                    "args_count": len(args),
                    "kwargs_keys": sorted(kwargs),
                },
            )

            try:
                result = function(self, *args, **kwargs)
            except Exception as e:
                logger.log_error(
                    e,
                    {
                        "operation": operation_name,
                        "operation_id": operation_id,
                        "duration_seconds": round(time.perf_counter() - started, 6),
                    },
                )
                raise

            logger.log_operation(
                f"{operation_name}_completed",
                {
                    "operation_id": operation_id,
                    "duration_seconds": round(time.perf_counter() - started, 6),
                    "success": True,
                },
            )
            return result

        return wrapper

    return decorator


def validate_metadata(required_fields: List[str]):
    """Reject a create() payload missing any of ``required_fields``."""

    def decorator(function: Callable) -> Callable:
        @wraps(function)
        def wrapper(self, *args, **kwargs):
            # payload is the last positional argument or metadata=
            metadata = args[-1] if args else kwargs.get("metadata", {})
            DataValidator.validate_required_fields(metadata, required_fields)
            return function(self, *args, **kwargs)

        return wrapper

    return decorator


def handle_db_errors(function: Callable) -> Callable:
    """
    Surface SQLAlchemy failures as StorageError.

    Constraint violations (duplicate address, unknown entity id) and any
    other driver error keep the original as ``__cause__``. Domain errors
    raised by the store itself are not touched.
    """

    @wraps(function)
    def wrapper(*args, **kwargs):
        try:
            return function(*args, **kwargs)
        except IntegrityError as e:
            raise StorageError(f"Constraint violated: {e.orig}") from e
        except SQLAlchemyError as e:
            raise StorageError(f"Storage failure: {e}") from e

    return wrapper
