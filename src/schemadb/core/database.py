"""
Database handle: one connection, one schema catalog, one statement cache.

Manifesto:
    Everything the query layer knows about a logical database lives on
    one object. Two databases are two handles; nothing is global, so
    tests open an in-memory handle per case and throw it away.

Architecture:
    ::

        Database
          ├─ DatabaseAdapter        (connection; sqlite3 or mysql.connector)
          ├─ ConnectionState        (depth, last SQL + params)
          ├─ StatementCache         (SQL text → Statement, per depth)
          ├─ QueryExecutor          (bind, run, lock retry)
          ├─ SchemaCatalog          (describe + cache)
          └─ TransactionManager     (depth guard, commit/rollback, retry)

        insert / update / save / find ──► describe ──► coerce_for_write ──► execute
        get_rows / get_row / cursor ────► execute ──► RowCursor (coerce_for_read)

Features:
    - ``insert`` fills NOT NULL columns the row omits and writes the
      generated id back into the row
    - ``update`` splits a row into SET and WHERE by primary key
    - ``save`` inserts or updates depending on whether the row exists
    - Rows may be dicts or attribute objects (dataclasses, plain objects)

Examples:
    >>> db = open_database(":memory:")
    >>> _ = db.execute_and_close("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT)")
    >>> row = {"name": "Fred"}
    >>> db.insert("users", row)
    1
    >>> db.find_row("users", row["id"])
    {'id': 1, 'name': 'Fred'}

Tags:
    database, handle, crud, schemadb

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any, TypeVar

from schemadb.core.adapters.base import DatabaseAdapter, Statement
from schemadb.core.adapters.registry import get_adapter
from schemadb.core.adapters.types import DatabaseConfig
from schemadb.core.coercion import coerce_for_write
from schemadb.core.connection import ConnectionState, resolve_config
from schemadb.core.cursor import RowCursor
from schemadb.core.dialect import Dialect, param_name
from schemadb.core.enums import LogicalType
from schemadb.core.errors import QueryError
from schemadb.core.executor import QueryExecutor
from schemadb.core.logging import get_logger
from schemadb.core.records import as_record
from schemadb.core.schema import SchemaCatalog, TableSchema
from schemadb.core.statements import StatementCache
from schemadb.core.transaction import TransactionManager

logger = get_logger(__name__)

T = TypeVar("T")


class Database:
    """A logical database handle.

    Args:
        config: DSN string, mapping, ``DatabaseSettings`` or ``DatabaseConfig``.
        **overrides: Config fields that win over ``config``.
    """

    def __init__(self, config: Any = None, **overrides: Any):
        self._config: DatabaseConfig = resolve_config(config, **overrides)
        self._adapter: DatabaseAdapter = get_adapter(self._config)
        self._state = ConnectionState(self._adapter)
        self._statements = StatementCache(self._adapter, reuse=self._config.reuse_statements)
        self._executor = QueryExecutor(self._state, self._statements)
        self._catalog = SchemaCatalog(self._executor)
        self._transactions = TransactionManager(self._state, self._statements, self._config)

    # -- Handle ------------------------------------------------------------

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    @property
    def adapter(self) -> DatabaseAdapter:
        return self._adapter

    @property
    def dialect(self) -> Dialect:
        return self._adapter.dialect

    @property
    def driver(self) -> str:
        """Dialect name: ``'sqlite'`` or ``'mysql'``."""
        return self._adapter.dialect.name

    @property
    def depth(self) -> int:
        """Current transaction nesting depth."""
        return self._state.depth

    @property
    def catalog(self) -> SchemaCatalog:
        return self._catalog

    @property
    def statements(self) -> StatementCache:
        return self._statements

    @property
    def is_connected(self) -> bool:
        return self._adapter.is_connected

    def connect(self) -> Database:
        self._state.ensure_connected()
        return self

    def disconnect(self) -> None:
        """Close every statement, forget cached schemas and close the connection."""
        self._statements.close_all()
        self._catalog.invalidate()
        self._adapter.disconnect()
        self._state.reset()

    def last_query(self) -> str:
        """The last SQL text and parameters, for diagnostics."""
        return self._state.last_query()

    # -- Schema ------------------------------------------------------------

    def describe(self, table: str, force: bool = False) -> TableSchema:
        return self._catalog.describe(table, force=force)

    def table_exists(self, table: str) -> bool:
        return self._catalog.table_exists(table)

    # -- Raw execution -----------------------------------------------------

    def execute(self, sql: str, params: Any = None) -> Statement:
        """Run ``sql`` and return the statement with its results pending."""
        return self._executor.execute(sql, params)

    def execute_and_close(self, sql: str, params: Any = None) -> int:
        """Run ``sql`` and return the affected row count."""
        return self._executor.execute_and_close(sql, params)

    # -- Reads -------------------------------------------------------------

    def cursor(
        self,
        sql: str,
        params: Any = None,
        row_type: Callable[..., Any] = dict,
        types: Mapping[str, LogicalType] | None = None,
    ) -> RowCursor:
        """Stream the rows of ``sql``; the cursor owns its statement until released."""
        statement = self._executor.execute(sql, params)
        self._statements.checkout(sql, statement)
        return RowCursor(statement, self._statements, types=types, row_type=row_type)

    def get_rows(self, sql: str, params: Any = None, row_type: Callable[..., Any] = dict) -> list[Any]:
        return self.cursor(sql, params, row_type).to_list()

    def get_row(self, sql: str, params: Any = None, row_type: Callable[..., Any] = dict) -> Any:
        """First row of ``sql``, or None."""
        with self.cursor(sql, params, row_type) as rows:
            return next(rows, None)

    def get_one(self, sql: str, params: Any = None) -> Any:
        """First column of the first row, or None."""
        row = self.get_row(sql, params)
        if not row:
            return None
        return next(iter(row.values()))

    def get_column(self, sql: str, params: Any = None) -> list[Any]:
        """First column of every row."""
        return [next(iter(row.values())) for row in self.get_rows(sql, params) if row]

    def get_rows_by_key(
        self,
        sql: str,
        params: Any = None,
        key_column: str | None = None,
        value_column: str | None = None,
        row_type: Callable[..., Any] = dict,
    ) -> dict[Any, Any]:
        """Rows indexed by ``key_column`` (default: the first column).

        With ``value_column`` each entry is that column's value instead of
        the whole row.
        """
        result: dict[Any, Any] = {}
        for row in self.get_rows(sql, params):
            if not row:
                continue
            key = row[key_column] if key_column is not None else next(iter(row.values()))
            if value_column is not None:
                result[key] = row[value_column]
            else:
                result[key] = row if row_type is dict else row_type(**row)
        return result

    def find(
        self,
        table: str,
        where: Mapping[str, Any] | None = None,
        row_type: Callable[..., Any] = dict,
        start: int = 0,
        limit: int | None = None,
    ) -> RowCursor:
        """Cursor over the rows of ``table`` matching every ``where`` column."""
        schema = self.describe(table)
        sql = "SELECT * FROM " + self.dialect.quote(schema.table)
        clause, params = self._build_where(schema, where or {})
        if clause:
            sql += " WHERE " + clause
        sql += self.dialect.limit_clause(start, limit)
        return self.cursor(sql, params, row_type, types=schema.types)

    def find_row(
        self,
        table: str,
        where: Any = None,
        row_type: Callable[..., Any] = dict,
    ) -> Any:
        """First matching row, or None.

        ``where`` may be a single value when the table has exactly one
        primary key.
        """
        if where is not None and not isinstance(where, Mapping):
            primaries = self.describe(table).primary_keys
            if len(primaries) != 1:
                raise QueryError(
                    f"find_row() cannot take a single value because {table} "
                    "does not have exactly one primary key."
                ).with_context(table=table)
            where = {primaries[0].name: where}

        with self.find(table, where, row_type, 0, 1) as rows:
            return next(rows, None)

    def find_row_by_primaries(self, table: str, row: Any, row_type: Callable[..., Any] = dict) -> Any:
        """The stored row with ``row``'s primary key, or None if a key is unset."""
        schema = self.describe(table)
        record = as_record(row)
        primaries = schema.primary_keys
        if not primaries:
            return None
        where = {}
        for col in primaries:
            value = record.get(col.name)
            if value is None:
                return None
            where[col.name] = value
        return self.find_row(table, where, row_type)

    def _build_where(self, schema: TableSchema, where: Mapping[str, Any]) -> tuple[str, dict[str, Any]]:
        conditions = []
        params: dict[str, Any] = {}
        for name, value in where.items():
            col = schema[name]
            key = param_name(col.name)
            op = " IS " if value is None else " = "
            conditions.append(self.dialect.quote(col.name) + op + ":" + key)
            params[key] = None if value is None else coerce_for_write(value, col)
        return " AND ".join(conditions), params

    # -- Writes ------------------------------------------------------------

    def insert(self, table: str, row: Any) -> int | None:
        """Insert ``row``; returns the generated id, which is also set on ``row``."""
        schema = self.describe(table)
        record = as_record(row)
        q = self.dialect.quote

        names = []
        params = []
        for col in schema.columns:
            value = record.get(col.name)
            required = not col.is_nullable and not col.has_default and not col.is_auto_increment
            if value is not None or required:
                names.append(q(col.name))
                params.append(coerce_for_write(value, col))

        if names:
            placeholders = ", ".join("?" for _ in names)
            sql = f"INSERT INTO {q(schema.table)} ({', '.join(names)}) VALUES ({placeholders})"
        else:
            sql = f"INSERT INTO {q(schema.table)} {self.dialect.default_values_clause()}"
        self._executor.execute_and_close(sql, params)

        auto = schema.auto_increment_column
        if auto is None:
            return None
        supplied = record.get(auto.name)
        new_id = int(supplied) if supplied is not None else self._adapter.last_insert_id()
        record.set(auto.name, new_id)
        return new_id

    def update(self, table: str, row: Any) -> int:
        """Update the stored row with ``row``'s primary key; returns the affected row count.

        Raises:
            QueryError: ``row`` has no primary key value or nothing to set.
        """
        schema = self.describe(table)
        record = as_record(row)
        q = self.dialect.quote

        assignments = []
        keys: dict[str, Any] = {}
        params: dict[str, Any] = {}
        for name, value in record.items():
            col = schema.get(name)
            if col is None:
                continue
            if col.is_primary_key:
                # Key columns only select the row; they are never assigned.
                if value is not None:
                    keys[col.name] = value
            elif not col.is_auto_increment:
                key = param_name(col.name)
                assignments.append(f"{q(col.name)} = :{key}")
                params[key] = coerce_for_write(value, col)

        if not keys:
            raise QueryError(f"No primary key set on row for updating table {table}").with_context(
                table=table, row=dict(record.items())
            )
        if not assignments:
            raise QueryError(f"No fields to update from row in table {table}").with_context(
                table=table, row=dict(record.items())
            )

        where, where_params = self._build_where(schema, keys)
        params.update(where_params)
        sql = f"UPDATE {q(schema.table)} SET {', '.join(assignments)} WHERE {where}"
        if self.dialect.supports_update_limit:
            sql += " LIMIT 1"
        return self._executor.execute_and_close(sql, params)

    def save(self, table: str, row: Any) -> Any:
        """Insert ``row`` if no stored row has its primary key, else update it.

        Returns the primary key value, or a tuple of values for a composite key.
        """
        if self.find_row_by_primaries(table, row) is None:
            self.insert(table, row)
        else:
            self.update(table, row)

        record = as_record(row)
        values = tuple(record.get(col.name) for col in self.describe(table).primary_keys)
        if not values:
            return None
        return values[0] if len(values) == 1 else values

    # -- Transactions ------------------------------------------------------

    def transaction(
        self,
        body: Callable[[], T],
        error: Callable[[BaseException], Any] | None = None,
    ) -> T | None:
        """Run ``body`` in a transaction; see :meth:`TransactionManager.transaction`."""
        return self._transactions.transaction(body, error)

    @contextmanager
    def transaction_scope(self) -> Iterator[Database]:
        """``with db.transaction_scope():`` form; a single attempt without lock retry."""
        with self._transactions.scope():
            yield self

    # -- Context manager ---------------------------------------------------

    def __enter__(self) -> Database:
        return self.connect()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.disconnect()

    def __repr__(self) -> str:
        return f"Database({self._config.to_connection_string()!r})"


def open_database(config: Any = None, **overrides: Any) -> Database:
    """Create a connected :class:`Database`."""
    return Database(config, **overrides).connect()


__all__ = [
    "Database",
    "open_database",
]
