"""
CSV import into an existing table.

Every row of the file is mapped onto the table's columns and inserted,
all inside one transaction: either the whole file lands or none of it.

Usage:
    from schemadb.tools.csv_import import import_csv

    ids = import_csv(db, "stocks", "stocks.csv", transform={
        "name": "Stock Name",                                # CSV header
        "market_cap": lambda row: float(row["Market Cap"]) / 1000,
        "shares": 1,                                         # CSV column index
        "beta": ["beta2", "Beta", "B"],                      # first header present
    })

Columns without a transform take the CSV column with the same name.
"""

from __future__ import annotations

import csv
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any

from schemadb.core.database import Database
from schemadb.core.errors import SchemaError
from schemadb.core.logging import LogContext, get_logger

logger = get_logger(__name__)

Transform = Callable[[Any], Any] | str | int | Sequence[str | int]


def _lookup(csv_row: Mapping[Any, str] | list[str], key: str | int) -> tuple[bool, Any]:
    if isinstance(csv_row, list):
        if isinstance(key, int) and -len(csv_row) <= key < len(csv_row):
            return True, csv_row[key]
        return False, None
    if key in csv_row:
        return True, csv_row[key]
    return False, None


def _column_value(
    column: str,
    transform: Transform,
    csv_row: Mapping[str, str] | list[str],
    line: list[str],
) -> tuple[bool, Any]:
    if callable(transform):
        return True, transform(csv_row)
    if isinstance(transform, int):
        if not -len(line) <= transform < len(line):
            raise SchemaError(f"CSV column {transform} not found for {column}").with_context(column=column)
        return True, line[transform]
    if isinstance(transform, str):
        found, value = _lookup(csv_row, transform)
        if not found:
            raise SchemaError(f"CSV column {transform!r} not found for {column}").with_context(column=column)
        return True, value
    for alias in transform:
        found, value = _lookup(csv_row, alias)
        if found:
            return True, value
    return False, None


def import_csv(
    db: Database,
    table: str,
    path: str | Path,
    transform: Mapping[str, Transform] | None = None,
    has_headers: bool = True,
    encoding: str = "utf-8",
) -> list[int | None]:
    """Insert every row of the CSV file at ``path`` into ``table``.

    Args:
        db: Target database.
        table: Existing table name.
        path: CSV file.
        transform: Per table column, where its value comes from: a
            callable receiving the CSV row, a header name, a column index
            or a list of header names to try in order.
        has_headers: Whether the first line holds column names. Without
            headers the CSV row passed to callables is a list.
        encoding: File encoding.

    Returns:
        The id generated for each inserted row (None when the table has
        no auto-increment column).
    """
    transform = transform or {}
    path = Path(path)

    def body() -> list[int | None]:
        ids: list[int | None] = []
        schema = db.describe(table)
        with open(path, encoding=encoding, newline="") as f:
            reader = csv.reader(f)
            headers = next(reader, None) if has_headers else None
            for line in reader:
                if not line:
                    continue
                csv_row: Mapping[str, str] | list[str]
                csv_row = dict(zip(headers, line, strict=False)) if headers is not None else line

                row: dict[str, Any] = {}
                for col in schema.columns:
                    if col.name in transform:
                        found, value = _column_value(col.name, transform[col.name], csv_row, line)
                    else:
                        found, value = _lookup(csv_row, col.name) if headers is not None else (False, None)
                    if found:
                        row[col.name] = value
                ids.append(db.insert(table, row))
        return ids

    with LogContext(table=table, database=db.driver):
        ids = db.transaction(body)
        logger.info("csv_imported", path=str(path), rows=len(ids or []))
    return ids or []


__all__ = [
    "import_csv",
]
