"""Type coercion between application values and backend values.

Pure functions, parameterised only by column metadata:

- :func:`coerce_for_write` turns an application value into something the
  column accepts (empty strings and None become the column's "empty"
  value, numbers and strings become temporal values for date columns).
- :func:`coerce_for_read` turns a raw driver value into a typed value.
- :func:`bind_kind` picks the native kind a parameter is bound as.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from schemadb.core.enums import BindKind, LogicalType
from schemadb.core.errors import CoercionError
from schemadb.core.schema import ColumnDescriptor
from schemadb.core.temporal import format_temporal, from_timestamp, parse_temporal

_SCALARS = (str, int, float, bool, bytes, bytearray, Decimal, date)

_FALSE_STRINGS = {"", "0", "false", "f", "no", "n", "off"}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def coerce_for_write(value: Any, col: ColumnDescriptor) -> Any:
    """Convert ``value`` to a value that can go into ``col`` without an error.

    Raises:
        CoercionError: ``value`` is a composite value, or a string that is
            not a date on a date column.
    """
    if value is not None and not isinstance(value, _SCALARS):
        raise CoercionError(
            f"Column {col.name} cannot store {value!r}", value=value
        ).with_context(column=col.name)

    lt = col.logical_type

    # Empty string means "empty" for every column except TEXT.
    if isinstance(value, str) and value == "" and lt is not LogicalType.TEXT:
        if col.is_nullable:
            return None
        if lt in (LogicalType.INT, LogicalType.FLOAT):
            return 0
        if lt is LogicalType.BOOL:
            return False
        if lt is LogicalType.DATETIME:
            return datetime.now().replace(microsecond=0)
        if lt is LogicalType.DATE:
            return date.today()

    # None on a NOT NULL column becomes the default or the type's empty value.
    # Temporal columns have no empty value and fall through unchanged.
    if value is None and not col.is_nullable:
        if col.has_default:
            return col.default_value
        if lt is LogicalType.TEXT:
            return ""
        if lt in (LogicalType.INT, LogicalType.FLOAT):
            return 0
        if lt is LogicalType.BOOL:
            return False

    if lt.is_temporal and value is not None:
        if _is_number(value):
            if isinstance(value, float) and not math.isfinite(value):
                raise CoercionError(
                    f"Column {col.name} cannot store {value!r} as a date", value=value
                ).with_context(column=col.name)
            moment = from_timestamp(float(value) if isinstance(value, Decimal) else value)
            return moment.date() if lt is LogicalType.DATE else moment
        if isinstance(value, str):
            try:
                return parse_temporal(value)
            except ValueError as e:
                raise CoercionError(
                    f"Column {col.name} cannot store {value!r} as a date", value=value, cause=e
                ).with_context(column=col.name) from e

    return value


def coerce_for_read(raw: Any, logical_type: LogicalType) -> Any:
    """Convert a raw driver value to the application type for ``logical_type``."""
    if raw is None:
        return None

    if logical_type is LogicalType.BOOL:
        if isinstance(raw, (bytes, bytearray)):
            return any(raw)
        if isinstance(raw, str):
            return raw.strip().lower() not in _FALSE_STRINGS
        return bool(raw)

    # SQLite stores any value in a numeric column; what isn't a number is returned as stored.
    if logical_type is LogicalType.INT:
        if isinstance(raw, (bytes, bytearray)):
            return int.from_bytes(raw, "big")
        if isinstance(raw, str):
            try:
                return int(raw)
            except ValueError:
                pass
            try:
                return int(float(raw))
            except (ValueError, OverflowError):
                return raw
        return int(raw)

    if logical_type is LogicalType.FLOAT:
        try:
            return float(raw)
        except (TypeError, ValueError):
            return raw

    if logical_type.is_temporal:
        if isinstance(raw, date):
            return raw
        if isinstance(raw, (bytes, bytearray)):
            raw = raw.decode("utf-8")
        if _is_number(raw):
            return from_timestamp(raw)
        try:
            return parse_temporal(str(raw))
        except ValueError as e:
            raise CoercionError(
                f"Cannot read {raw!r} as a {logical_type.value}", value=raw, cause=e
            ) from e

    return raw


def coerce_row(row: dict[str, Any], types: Mapping[str, LogicalType]) -> dict[str, Any]:
    """Apply read coercion in place to every non-null cell whose column has a known type.

    Columns missing from ``types`` (aliases, computed expressions) are left
    untouched. Returns ``row``.
    """
    for name, value in row.items():
        if value is None:
            continue
        logical = types.get(name)
        if logical is None:
            continue
        row[name] = coerce_for_read(value, logical)
    return row


def bind_kind(value: Any) -> tuple[Any, BindKind]:
    """The value to bind and the native kind to bind it as.

    Temporal values are formatted to strings; floats are bound as strings.
    """
    if value is None:
        return None, BindKind.NULL
    if isinstance(value, bool):
        return value, BindKind.BOOL
    if isinstance(value, int):
        return value, BindKind.INT
    if isinstance(value, date):
        return format_temporal(value), BindKind.STR
    if isinstance(value, (bytes, bytearray)):
        return bytes(value), BindKind.STR
    if isinstance(value, float):
        return repr(value), BindKind.STR
    return str(value), BindKind.STR


__all__ = [
    "coerce_for_write",
    "coerce_for_read",
    "coerce_row",
    "bind_kind",
]
