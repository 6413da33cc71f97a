"""
Shared enums for the query layer.

STDLIB ONLY - NO PYDANTIC.
"""

from enum import Enum


class LogicalType(str, Enum):
    """
    Dialect-independent classification of a column.

    Every backend type string maps to exactly one of these. DATE holds
    date-only values, DATETIME holds values with a time of day.
    """

    BOOL = "Bool"
    INT = "Int"
    FLOAT = "Float"
    DATE = "Date"
    DATETIME = "DateTime"
    ENUM = "Enum"
    TEXT = "Text"

    @property
    def is_temporal(self) -> bool:
        return self in (LogicalType.DATE, LogicalType.DATETIME)


class BindKind(str, Enum):
    """
    Native kind a parameter is bound as.

    There is no FLOAT kind: floats travel as strings so the driver
    cannot round them.
    """

    NULL = "null"
    INT = "int"
    BOOL = "bool"
    STR = "str"


class CursorState(str, Enum):
    """Lifecycle of a streaming row cursor."""

    NOT_STARTED = "not_started"
    ACTIVE = "active"
    EXHAUSTED = "exhausted"


__all__ = [
    "LogicalType",
    "BindKind",
    "CursorState",
]
