"""Streaming row cursor over a checked-out statement."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from typing import Any

from schemadb.core.adapters.base import Statement
from schemadb.core.coercion import coerce_row
from schemadb.core.enums import CursorState, LogicalType
from schemadb.core.errors import IterationError
from schemadb.core.logging import get_logger
from schemadb.core.statements import StatementCache

logger = get_logger(__name__)


class RowCursor:
    """
    Single-pass iterator over the rows of one executed statement.

    The cursor owns its statement until it is released, which happens
    automatically when iteration runs past the last row, on ``to_list()``,
    on ``release()`` / ``close()`` and when a ``with`` block exits. Once
    exhausted the cursor cannot be iterated again.

    Each row is read-coerced with ``types`` (the catalog types of the
    queried table) or, when no types are given, with whatever logical
    types the driver reports for the result columns. Columns without a
    known type are returned as the driver produced them.

    Example:
        with db.find("users", {"name": "Fred"}) as rows:
            for row in rows:
                print(row["email"])
    """

    def __init__(
        self,
        statement: Statement,
        statements: StatementCache,
        types: Mapping[str, LogicalType] | None = None,
        row_type: Callable[..., Any] = dict,
    ):
        self._statement = statement
        self._statements = statements
        self._types = types
        self._row_type = row_type
        self._state = CursorState.NOT_STARTED
        self._released = False

    @property
    def state(self) -> CursorState:
        return self._state

    @property
    def sql(self) -> str:
        return self._statement.sql

    @property
    def columns(self) -> list[str]:
        return self._statement.columns

    @property
    def released(self) -> bool:
        return self._released

    def __iter__(self) -> Iterator[Any]:
        if self._state is CursorState.EXHAUSTED:
            raise IterationError("Cursor is exhausted and cannot be iterated again").with_context(
                sql=self._statement.sql
            )
        return self

    def __next__(self) -> Any:
        if self._state is CursorState.EXHAUSTED:
            raise StopIteration
        if self._state is CursorState.NOT_STARTED:
            self._state = CursorState.ACTIVE
            if self._types is None:
                self._types = self._statement.column_types()

        raw = self._statement.fetchone()
        if raw is None:
            self.release()
            raise StopIteration
        return self._materialize(raw)

    def _materialize(self, raw: dict[str, Any]) -> Any:
        row = coerce_row(raw, self._types or {})
        if self._row_type is dict:
            return row
        return self._row_type(**row)

    def to_list(self) -> list[Any]:
        """Every remaining row; releases the statement."""
        return list(iter(self))

    def release(self) -> None:
        """Hand the statement back to the cache; the cursor becomes exhausted."""
        self._state = CursorState.EXHAUSTED
        if self._released:
            return
        self._released = True
        self._statements.release(self._statement)
        logger.debug("cursor_released", sql=self._statement.sql)

    close = release

    def __enter__(self) -> RowCursor:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()

    def __repr__(self) -> str:
        return f"RowCursor({self._statement.sql!r}, {self._state.value})"


__all__ = [
    "RowCursor",
]
