"""Database adapter base class and prepared-statement handle.

Manifesto:
    The query layer needs PDO-like primitives (prepare, bind, execute,
    fetch, close cursor, begin/commit/rollback, last insert id) on top of
    DB-API drivers that do not expose them directly. The adapter provides
    exactly those primitives and nothing else; caching, coercion and retry
    policy live above it.

Features:
    - Abstract ``connect()``, ``disconnect()``, ``begin()``, ``commit()``,
      ``rollback()``, ``last_insert_id()``
    - ``prepare(sql)`` returning a :class:`Statement` keyed by its SQL text
    - Placeholder translation delegated to the adapter's :class:`Dialect`
    - Context-manager protocol for connection lifecycle

Tags:
    schemadb, database, abstract-base, adapter-pattern, prepared-statement

Doc-Types:
    api-reference
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from schemadb.core.dialect import Dialect, get_dialect
from schemadb.core.enums import BindKind, LogicalType
from schemadb.core.errors import DatabaseConnectionError, SchemaDBError
from schemadb.core.logging import get_logger
from schemadb.core.protocols import DBAPIConnection, DBAPICursor

from .types import DatabaseConfig, DatabaseType

logger = get_logger(__name__)


class Statement:
    """
    A prepared statement handle.

    Holds the caller's SQL text (the cache key), the driver-ready SQL,
    the parameters bound for the next ``execute()`` and, while results
    are pending, the live DB-API cursor. ``close_cursor()`` drops the
    cursor but keeps the statement reusable; ``close()`` retires it.
    """

    def __init__(self, adapter: DatabaseAdapter, sql: str):
        self.sql = sql
        self.native_sql = adapter.dialect.translate(sql)
        self._adapter = adapter
        self._cursor: DBAPICursor | None = None
        self._params: dict[int | str, Any] = {}
        self.closed = False

    # -- Binding -----------------------------------------------------------

    def bind(self, key: int | str, value: Any, kind: BindKind) -> None:
        """Bind ``value`` to a 1-based position or a name as ``kind``."""
        if kind is BindKind.NULL or value is None:
            native = None
        elif kind is BindKind.INT:
            native = int(value)
        elif kind is BindKind.BOOL:
            native = bool(value)
        else:
            native = value if isinstance(value, (str, bytes)) else str(value)
        self._params[key] = native

    def clear_bindings(self) -> None:
        self._params = {}

    @property
    def bound(self) -> dict[int | str, Any]:
        return dict(self._params)

    def _native_params(self) -> Any:
        if not self._params:
            return ()
        if all(isinstance(k, int) for k in self._params):
            return tuple(self._params[k] for k in sorted(self._params))
        return {str(k).lstrip(":"): v for k, v in self._params.items()}

    # -- Execution ---------------------------------------------------------

    def execute(self) -> None:
        """Run the statement with the currently bound parameters."""
        if self.closed:
            raise SchemaDBError(f"Statement is closed: {self.sql}")
        if self._cursor is None:
            self._cursor = self._adapter.new_cursor()
        self._cursor.execute(self.native_sql, self._native_params())

    @property
    def is_open(self) -> bool:
        """Whether a cursor with (possibly) unread results is attached."""
        return self._cursor is not None

    @property
    def columns(self) -> list[str]:
        if self._cursor is None or not self._cursor.description:
            return []
        return [d[0] for d in self._cursor.description]

    @property
    def description(self) -> Any:
        return self._cursor.description if self._cursor is not None else None

    @property
    def rowcount(self) -> int:
        return self._cursor.rowcount if self._cursor is not None else -1

    @property
    def lastrowid(self) -> Any:
        return self._cursor.lastrowid if self._cursor is not None else None

    def fetchone(self) -> dict[str, Any] | None:
        """Next row as a ``{column: raw value}`` dict, or None when exhausted."""
        if self._cursor is None or not self._cursor.description:
            return None
        row = self._cursor.fetchone()
        if row is None:
            return None
        return dict(zip(self.columns, row, strict=False))

    def fetchall(self) -> list[dict[str, Any]]:
        if self._cursor is None or not self._cursor.description:
            return []
        columns = self.columns
        return [dict(zip(columns, row, strict=False)) for row in self._cursor.fetchall()]

    def column_types(self) -> dict[str, LogicalType]:
        """Logical types the driver reports for the current result columns."""
        return self._adapter.column_types(self)

    def close_cursor(self) -> None:
        """Discard pending results; the statement can be executed again."""
        if self._cursor is not None:
            try:
                self._cursor.close()
            finally:
                self._cursor = None

    def close(self) -> None:
        self.close_cursor()
        self._params = {}
        self.closed = True

    def __repr__(self) -> str:
        state = "closed" if self.closed else ("open" if self.is_open else "idle")
        return f"Statement({self.sql!r}, {state})"


class DatabaseAdapter(ABC):
    """
    Abstract base class for database adapters.

    One adapter owns one physical connection.
    """

    def __init__(self, config: DatabaseConfig):
        self._config = config
        self._conn: DBAPIConnection | None = None
        self._dialect: Dialect = get_dialect(config.db_type.value)

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    @property
    def dialect(self) -> Dialect:
        """SQL dialect for this adapter's database type."""
        return self._dialect

    @property
    def db_type(self) -> DatabaseType:
        """Database type."""
        return self._config.db_type

    @property
    def is_connected(self) -> bool:
        """Whether adapter is connected."""
        return self._conn is not None

    @abstractmethod
    def connect(self) -> None:
        """Establish connection to database."""
        ...

    def disconnect(self) -> None:
        """Close connection to database."""
        if self._conn is not None:
            try:
                self._conn.close()
            finally:
                self._conn = None
                logger.debug("disconnected", dialect=self.dialect.name)

    def get_connection(self) -> DBAPIConnection:
        """The native connection, connecting on first use."""
        if self._conn is None:
            self.connect()
        if self._conn is None:
            raise DatabaseConnectionError(
                f"{type(self).__name__}.connect() did not open a connection"
            ).with_context(dialect=self.dialect.name)
        return self._conn

    @abstractmethod
    def new_cursor(self) -> DBAPICursor:
        """A fresh DB-API cursor on the connection."""
        ...

    def prepare(self, sql: str) -> Statement:
        """Prepare ``sql`` for repeated execution."""
        self.get_connection()
        return Statement(self, sql)

    # -- Transactions ------------------------------------------------------

    @abstractmethod
    def begin(self) -> None:
        """Start a native transaction."""
        ...

    def commit(self) -> None:
        self.get_connection().commit()

    def rollback(self) -> None:
        self.get_connection().rollback()

    # -- Metadata ----------------------------------------------------------

    @abstractmethod
    def last_insert_id(self) -> int | None:
        """Id generated by the most recent INSERT on this connection."""
        ...

    def column_types(self, statement: Statement) -> dict[str, LogicalType]:  # noqa: ARG002
        """Driver-reported logical types of a result set (empty when unknown)."""
        return {}

    def __enter__(self) -> DatabaseAdapter:
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.disconnect()


__all__ = [
    "DatabaseAdapter",
    "Statement",
]
