#!/usr/bin/env python3
"""
exceptions.py
--------------------
Custom exception classes for the entrel project.

This module defines a hierarchy of exceptions used throughout the project
to separate programming errors, storage failures and soft validation
problems.

Exception Hierarchy:
    Exception (built-in)
    ├── DatabaseError - Base for all database-related errors
    │   ├── StorageError - A persistence operation failed
    │   └── NotFoundError - A targeted record no longer exists
    ├── ValidationError - Data validation failures
    ├── PreconditionError - Caller sequencing is wrong
    └── ValueError (built-in)
        └── InvalidArgumentError - Required identifier missing

Usage:
    from entrel.core.exceptions import DatabaseError, PreconditionError

    try:
        handler.save(rows, instanceid)
    except PreconditionError:
        raise  # caller must persist the host first
    except DatabaseError as e:
        logger.error(f"Database operation failed: {e}")
"""


class DatabaseError(Exception):
    """
    Base exception for database-related errors.

    Raised when database operations fail due to connection issues,
    query errors, integrity violations, or other database problems.

    This is the parent class for all database-specific exceptions.
    Catch this to handle any database error, or catch specific
    subclasses for more granular error handling.

    Examples:
        >>> raise DatabaseError("RelationManager requires active session")

    See Also:
        StorageError, NotFoundError
    """

    pass


class StorageError(DatabaseError):
    """
    Exception for failed persistence operations.

    Raised when the underlying write or read fails:
    - Integrity constraint violations
    - Locked or unreachable database
    - Driver-level errors

    The relation core never retries these itself; retry policy belongs to
    the storage layer (see BaseManager._execute_with_retry).

    Examples:
        >>> raise StorageError("Constraint violated: UNIQUE constraint failed")
    """

    pass


class NotFoundError(DatabaseError):
    """
    Exception for records that are expected to exist but do not.

    Raised when:
    - Updating a relation whose id has been removed
    - Loading an entity id that is unknown

    Examples:
        >>> raise NotFoundError("No EntityRelation found with id: 12")
        >>> raise NotFoundError("No Entity found with id: 5")
    """

    pass


class ValidationError(Exception):
    """
    Exception for data validation failures.

    Raised when input data fails validation checks:
    - Missing required fields
    - Type mismatches
    - Malformed configuration files

    Conflict-check problems found while validating a form are NOT raised;
    they are collected in a ValidationResult and returned as data.

    Examples:
        >>> raise ValidationError("Required field 'name' missing or empty")
        >>> raise ValidationError("Area config entry 2 is missing 'table'")
    """

    pass


class PreconditionError(Exception):
    """
    Exception for calls made in the wrong order.

    Raised when a relation is saved for a host that has not been persisted
    yet (host id is zero). This is a programming error in the caller: the
    host record must be created before its entity relation.

    Examples:
        >>> raise PreconditionError("Host instance id must be set before saving")
    """

    pass


class InvalidArgumentError(ValueError):
    """
    Exception for missing or unusable identifiers.

    Raised when:
    - A cascading delete is requested without a parent id
    - A handler is built for an unknown (component, area) pair

    Examples:
        >>> raise InvalidArgumentError("Missing booking id")
        >>> raise InvalidArgumentError("Unknown host area: mod_booking/session")
    """

    pass
