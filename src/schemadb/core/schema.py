"""
Schema catalog: per-table column metadata for both dialects.

``SchemaCatalog.describe(table)`` introspects a table once and caches the
resulting immutable ``TableSchema`` for the lifetime of the handle.
Re-describing with ``force=True`` replaces the entry; it is never edited
in place.

Manifesto:
    Coercion, INSERT column selection, UPDATE key partitioning and typed
    row materialisation all need the same four facts per column (type,
    nullability, default, key flags). Reading them once per table and
    indexing them by lower-cased name keeps every caller O(1) and
    dialect-agnostic.

Architecture:
    ::

        describe("Users")
            │
            ├─ cache hit ─────────────────────────────► TableSchema
            │
            ├─ sqlite: PRAGMA table_info('Users')
            │          + sqlite_sequence probe (auto-increment)
            ├─ mysql:  DESCRIBE `Users`
            │
            └─ native type ──(ordered regex, first match)──► LogicalType

Features:
    - Case-insensitive lookup, case-preserving names
    - Auto-increment detection for INTEGER row-id aliases and
      ``AUTOINCREMENT`` tables on SQLite
    - ``invalidate()`` to drop one or all cached tables

Examples:
    >>> schema = catalog.describe("users")
    >>> schema["EMAIL"].name
    'email'
    >>> [c.name for c in schema.primary_keys]
    ['id']

Tags:
    schema, introspection, metadata, cache, schemadb

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from schemadb.core.dialect import Dialect
from schemadb.core.enums import LogicalType
from schemadb.core.errors import QueryError, SchemaError
from schemadb.core.logging import get_logger

if TYPE_CHECKING:
    from schemadb.core.executor import QueryExecutor

logger = get_logger(__name__)


@dataclass(frozen=True)
class ColumnDescriptor:
    """One column of a backend table."""

    name: str
    logical_type: LogicalType = LogicalType.TEXT
    original_type: str = ""
    is_nullable: bool = True
    is_primary_key: bool = False
    is_auto_increment: bool = False
    default_value: Any = None

    @property
    def key(self) -> str:
        """Lower-cased lookup key."""
        return self.name.lower()

    @property
    def has_default(self) -> bool:
        return self.default_value is not None


class TableSchema(Mapping[str, ColumnDescriptor]):
    """Immutable, ordered collection of a table's columns.

    Behaves as a read-only mapping keyed by column name, where lookups are
    case-insensitive and iteration yields original-case names in backend
    order.
    """

    __slots__ = ("_table", "_columns", "_index")

    def __init__(self, table: str, columns: list[ColumnDescriptor] | tuple[ColumnDescriptor, ...]):
        self._table = table
        self._columns = tuple(columns)
        self._index = {c.key: c for c in self._columns}

    @property
    def table(self) -> str:
        return self._table

    @property
    def columns(self) -> tuple[ColumnDescriptor, ...]:
        return self._columns

    @property
    def names(self) -> list[str]:
        return [c.name for c in self._columns]

    @property
    def primary_keys(self) -> list[ColumnDescriptor]:
        return [c for c in self._columns if c.is_primary_key]

    @property
    def auto_increment_column(self) -> ColumnDescriptor | None:
        return next((c for c in self._columns if c.is_auto_increment), None)

    @property
    def types(self) -> dict[str, LogicalType]:
        """``{column name: logical type}`` for read coercion."""
        return {c.name: c.logical_type for c in self._columns}

    def __getitem__(self, name: str) -> ColumnDescriptor:
        try:
            return self._index[name.lower()]
        except KeyError:
            raise SchemaError(
                f"Column '{name}' does not exist in table '{self._table}'."
            ).with_context(table=self._table, column=name) from None

    def get(self, name: str, default: Any = None) -> Any:
        return self._index.get(name.lower(), default)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._index

    def __iter__(self) -> Iterator[str]:
        return (c.name for c in self._columns)

    def __len__(self) -> int:
        return len(self._columns)

    def __repr__(self) -> str:
        return f"TableSchema({self._table!r}, {self.names!r})"


def logical_type_for(native_type: str, dialect: Dialect) -> LogicalType:
    """Map a backend type string to a logical type; unmatched types are TEXT."""
    for logical, pattern in dialect.type_patterns:
        if pattern.search(native_type or ""):
            return logical
    return LogicalType.TEXT


class SchemaCatalog:
    """Introspects and caches table schemas for one database handle."""

    def __init__(self, executor: QueryExecutor):
        self._executor = executor
        self._tables: dict[str, TableSchema] = {}

    @property
    def dialect(self) -> Dialect:
        return self._executor.dialect

    def describe(self, table: str, force: bool = False) -> TableSchema:
        """Column metadata for ``table``.

        Raises:
            SchemaError: If the table does not exist.
        """
        if not force and table in self._tables:
            return self._tables[table]

        if self.dialect.name == "sqlite":
            columns = self._describe_sqlite(table)
        elif self.dialect.name == "mysql":
            columns = self._describe_mysql(table)
        else:
            raise SchemaError(f"Unsupported database: {self.dialect.name}")

        if not columns:
            raise SchemaError(f'Table "{table}" doesn\'t exist.').with_context(table=table)

        schema = TableSchema(table, columns)
        self._tables[table] = schema
        logger.debug("table_described", table=table, columns=len(schema), dialect=self.dialect.name)
        return schema

    def is_cached(self, table: str) -> bool:
        return table in self._tables

    def invalidate(self, table: str | None = None) -> None:
        """Forget one table's schema, or every cached schema."""
        if table is None:
            self._tables.clear()
        else:
            self._tables.pop(table, None)

    def table_exists(self, table: str) -> bool:
        rows = self._executor.fetch_all(self.dialect.table_exists_query(), [table])
        return len(rows) > 0

    # -- Dialect readers ---------------------------------------------------

    def _describe_sqlite(self, table: str) -> list[ColumnDescriptor]:
        rows = self._executor.fetch_all(self.dialect.describe_sql(table))
        if not rows:
            return []

        pk_count = sum(1 for r in rows if int(r["pk"] or 0) > 0)
        in_sequence: bool | None = None
        columns = []
        for row in rows:
            native_type = row["type"] or ""
            is_primary = int(row["pk"] or 0) > 0
            is_auto = False
            if is_primary:
                # "INTEGER PRIMARY KEY" aliases the rowid: https://sqlite.org/autoinc.html
                if native_type.upper() == "INTEGER" and pk_count == 1:
                    is_auto = True
                else:
                    if in_sequence is None:
                        in_sequence = self._sqlite_sequence_has(table)
                    is_auto = in_sequence
            columns.append(
                ColumnDescriptor(
                    name=row["name"],
                    logical_type=logical_type_for(native_type, self.dialect),
                    original_type=native_type,
                    is_nullable=not int(row["notnull"] or 0),
                    is_primary_key=is_primary,
                    is_auto_increment=is_auto,
                    default_value=_sqlite_default(row["dflt_value"]),
                )
            )
        return columns

    def _sqlite_sequence_has(self, table: str) -> bool:
        registry = self._executor.fetch_all(
            "SELECT count(*) AS c FROM sqlite_master WHERE type='table' AND name='sqlite_sequence'"
        )
        if not registry or not registry[0]["c"]:
            return False
        rows = self._executor.fetch_all("SELECT COUNT(*) AS c FROM sqlite_sequence WHERE name = ?", [table])
        return bool(rows and rows[0]["c"])

    def _describe_mysql(self, table: str) -> list[ColumnDescriptor]:
        try:
            rows = self._executor.fetch_all(self.dialect.describe_sql(table))
        except QueryError as e:
            raise SchemaError(
                f'Table "{table}" doesn\'t exist.', cause=e
            ).with_context(table=table) from e

        columns = []
        for row in rows:
            native_type = _text(row["Type"])
            columns.append(
                ColumnDescriptor(
                    name=_text(row["Field"]),
                    logical_type=logical_type_for(native_type, self.dialect),
                    original_type=native_type,
                    is_nullable=_text(row["Null"]).upper() == "YES",
                    is_primary_key=_text(row["Key"]).upper() == "PRI",
                    is_auto_increment="auto_increment" in _text(row["Extra"]).lower(),
                    default_value=_text(row["Default"]) if row["Default"] is not None else None,
                )
            )
        return columns


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8")
    return str(value)


def _sqlite_default(value: Any) -> Any:
    """Unquote SQLite's literal default text (``'abc'`` → ``abc``, ``NULL`` → None)."""
    if value is None:
        return None
    text = str(value)
    if text.upper() == "NULL":
        return None
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "'\"":
        return text[1:-1].replace(text[0] * 2, text[0])
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return text


__all__ = [
    "ColumnDescriptor",
    "TableSchema",
    "SchemaCatalog",
    "logical_type_for",
]
