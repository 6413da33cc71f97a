"""
Structured error types for schemadb.

Every failure raised by the query layer is a ``SchemaDBError`` carrying a
category, an explicit retry flag, structured context and the chained
driver exception, so callers can log ``error.to_dict()`` without losing
the SQL text that failed.

Manifesto:
    - **Typed hierarchy:** schema, coercion, query, transaction and
      iteration failures are distinct classes
    - **Explicit retry semantics:** only lock contention is retryable
    - **Rich context:** query errors carry the last SQL and parameters
    - **Error chaining:** the native driver error is kept as ``cause``

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                        SchemaDBError                          │
        │        (category, retryable, context, cause)                  │
        ├──────────────────────────────────────────────────────────────┤
        │  ConfigError        DatabaseConnectionError   SchemaError     │
        │  (CONFIG)           (CONNECTION, retryable)   (SCHEMA)        │
        │                                                               │
        │  CoercionError      QueryError                TransactionError│
        │  (COERCION,         (QUERY)                   (TRANSACTION)   │
        │   also TypeError)      │                                      │
        │                     DatabaseLockedError       IterationError  │
        │                     (retryable)               (ITERATION)     │
        └──────────────────────────────────────────────────────────────┘

Examples:
    >>> err = QueryError("no such table: users", sql="SELECT * FROM users")
    >>> err.to_dict()["context"]["sql"]
    'SELECT * FROM users'

Tags:
    error-handling, exception-hierarchy, retry-logic, schemadb

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error categories used for classification and logging."""

    CONFIG = "CONFIG"
    CONNECTION = "CONNECTION"
    SCHEMA = "SCHEMA"
    COERCION = "COERCION"
    QUERY = "QUERY"
    TRANSACTION = "TRANSACTION"
    ITERATION = "ITERATION"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only non-None fields are emitted by ``to_dict()``; anything without a
    dedicated field goes into ``metadata``.

    Attributes:
        table: Table the operation targeted
        column: Column the failing value was destined for
        sql: Last SQL text sent to the driver
        params: Parameters bound to that SQL
        dialect: ``sqlite`` or ``mysql``
        metadata: Additional key-value pairs
    """

    table: str | None = None
    column: str | None = None
    sql: str | None = None
    params: Any = None
    dialect: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["table", "column", "sql", "params", "dialect"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class SchemaDBError(Exception):
    """
    Base exception for all schemadb errors.

    Subclasses set ``default_category`` and ``default_retryable``; both
    can be overridden per instance.

    Examples:
        >>> error = SchemaDBError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.with_context(table="users").context.table
        'users'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> SchemaDBError:
        """
        Add context to this error (fluent API).

        Usage:
            raise SchemaError("Unknown column").with_context(table="users", column="nmae")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION / CONNECTION
# =============================================================================


class ConfigError(SchemaDBError):
    """Connection configuration is missing, malformed or names an unknown dialect."""

    default_category = ErrorCategory.CONFIG


class DatabaseConnectionError(SchemaDBError):
    """The driver could not open a connection."""

    default_category = ErrorCategory.CONNECTION
    default_retryable = True


# =============================================================================
# SCHEMA / COERCION
# =============================================================================


class SchemaError(SchemaDBError):
    """Table or column not found."""

    default_category = ErrorCategory.SCHEMA


class CoercionError(SchemaDBError, TypeError):
    """A value cannot be stored in, or read from, a column of the given type.

    Subclasses the builtin ``TypeError`` so ``except TypeError`` also works.
    """

    default_category = ErrorCategory.COERCION

    def __init__(self, message: str, *, value: Any = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.value = value

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.value is not None:
            result["value"] = repr(self.value)
        return result


# =============================================================================
# QUERY / TRANSACTION / ITERATION
# =============================================================================


class QueryError(SchemaDBError):
    """SQL execution failed, or a high-level request could not be turned into SQL.

    ``sql`` and ``params`` hold the last statement sent to the driver.
    """

    default_category = ErrorCategory.QUERY

    def __init__(
        self,
        message: str,
        *,
        sql: str | None = None,
        params: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.sql = sql
        self.params = params
        if sql is not None:
            self.context.sql = sql
        if params is not None:
            self.context.params = params


class DatabaseLockedError(QueryError):
    """The embedded database stayed locked past the lock timeout."""

    default_retryable = True


class TransactionError(SchemaDBError):
    """Re-entrant ``transaction()`` call or nesting depth exceeded."""

    default_category = ErrorCategory.TRANSACTION


class IterationError(SchemaDBError):
    """A single-pass cursor was iterated a second time."""

    default_category = ErrorCategory.ITERATION


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


# Message fragment sqlite3 uses for SQLITE_BUSY / SQLITE_LOCKED.
SQLITE_LOCKED_MESSAGE = "database is locked"


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, SchemaDBError):
        return error.retryable
    return False


def is_lock_error(error: BaseException) -> bool:
    """Whether ``error`` is the embedded engine's lock-contention signature.

    Wrapped errors are unwrapped through ``cause`` first.
    """
    while isinstance(error, SchemaDBError) and error.cause is not None:
        if isinstance(error, DatabaseLockedError):
            return True
        error = error.cause
    if isinstance(error, DatabaseLockedError):
        return True
    if not isinstance(error, sqlite3.OperationalError):
        return False
    code = getattr(error, "sqlite_errorcode", None)
    if code in (sqlite3.SQLITE_BUSY, sqlite3.SQLITE_LOCKED):
        return True
    return SQLITE_LOCKED_MESSAGE in str(error)


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "SchemaDBError",
    "ConfigError",
    "DatabaseConnectionError",
    "SchemaError",
    "CoercionError",
    "QueryError",
    "DatabaseLockedError",
    "TransactionError",
    "IterationError",
    "SQLITE_LOCKED_MESSAGE",
    "is_retryable",
    "is_lock_error",
]
