"""SQL dialect abstraction for the two supported backends.

Provides a ``Dialect`` protocol and one implementation per backend. The
query layer writes every statement with ``?`` (positional) and ``:name``
(named) placeholders; the dialect quotes identifiers, supplies the
introspection SQL, maps native type strings to a :class:`LogicalType`
and rewrites placeholders into the driver's paramstyle.

Manifesto:
    The catalog, executor and transaction code must not contain
    ``if sqlite ... else mysql`` branches for SQL text. Every
    backend-specific fragment lives here.

    - **One interface:** Dialect protocol for all SQL fragments
    - **Zero coupling:** no driver imports in this module
    - **Ordered type patterns:** first match wins, unmatched → TEXT

Architecture::

    ┌──────────────────────────────┐   ┌──────────────────────────────┐
    │ SQLiteDialect                │   │ MySQLDialect                 │
    │  "ident"                     │   │  `ident`                     │
    │  PRAGMA table_info('t')      │   │  DESCRIBE `t`                │
    │  ? / :name  (native)         │   │  %s / %(name)s  (rewritten)  │
    │  no UPDATE ... LIMIT         │   │  UPDATE ... LIMIT 1          │
    │  lock retry: yes             │   │  lock retry: no              │
    └──────────────────────────────┘   └──────────────────────────────┘

Examples:
    >>> from schemadb.core.dialect import get_dialect
    >>> d = get_dialect("mysql")
    >>> d.quote("users")
    '`users`'
    >>> d.translate("SELECT * FROM t WHERE a = ? AND b = :b")
    'SELECT * FROM t WHERE a = %s AND b = %(b)s'

Tags:
    dialect, sql, abstraction, portability, sqlite, mysql, schemadb

Doc-Types:
    - API Reference
    - Architecture Documentation
"""

from __future__ import annotations

import re
from typing import Protocol, runtime_checkable

from schemadb.core.enums import LogicalType
from schemadb.core.errors import ConfigError, is_lock_error

TypePatterns = tuple[tuple[LogicalType, re.Pattern[str]], ...]

# String literals and quoted identifiers are copied through untouched.
_PLACEHOLDER_RE = re.compile(
    r"""'(?:[^']|'')*'"""
    r'''|"(?:[^"]|"")*"'''
    r"|`[^`]*`"
    r"|(?<![:\w]):([A-Za-z_][A-Za-z0-9_]*)"
    r"|\?"
)

_PARAM_NAME_RE = re.compile(r"[^a-zA-Z0-9_]")


def param_name(column: str) -> str:
    """Placeholder-safe name derived from a column name."""
    return _PARAM_NAME_RE.sub("", column)


def _patterns(*pairs: tuple[LogicalType, str]) -> TypePatterns:
    return tuple((lt, re.compile(p, re.IGNORECASE)) for lt, p in pairs)


@runtime_checkable
class Dialect(Protocol):
    """SQL dialect contract.

    Every method returns a SQL fragment or a decision that depends on
    the backend; none of them talk to a database.
    """

    @property
    def name(self) -> str:
        """Dialect identifier (``'sqlite'`` or ``'mysql'``)."""
        ...

    @property
    def type_patterns(self) -> TypePatterns:
        """Ordered (logical type, regex) pairs applied to native type strings."""
        ...

    @property
    def supports_update_limit(self) -> bool:
        """Whether ``UPDATE ... LIMIT n`` is accepted."""
        ...

    @property
    def retries_locks(self) -> bool:
        """Whether lock contention is retried automatically."""
        ...

    def quote(self, identifier: str) -> str:
        """Quote a table or column name."""
        ...

    def describe_sql(self, table: str) -> str:
        """Introspection statement listing one row per column."""
        ...

    def table_exists_query(self) -> str:
        """Query taking one ``?`` placeholder that returns rows if the table exists."""
        ...

    def default_values_clause(self) -> str:
        """INSERT tail that fills every column with its default."""
        ...

    def limit_clause(self, start: int, limit: int | None) -> str:
        """``LIMIT`` fragment (leading space) or ``''``."""
        ...

    def translate(self, sql: str) -> str:
        """Rewrite ``?`` / ``:name`` placeholders into the driver's paramstyle."""
        ...

    def is_lock_error(self, error: BaseException) -> bool:
        """Whether ``error`` is this backend's retryable lock signature."""
        ...


# =========================================================================
# Concrete Dialect Implementations
# =========================================================================

# Largest BIGINT UNSIGNED; both engines need a row count when only an offset is given.
_MAX_ROWS = 18446744073709551615


class SQLiteDialect:
    """Embedded-file dialect: ``"ident"``, ``PRAGMA table_info``, native placeholders."""

    _TYPES = _patterns(
        (LogicalType.BOOL, r"BOOL"),
        (LogicalType.DATETIME, r"DATETIME|TIMESTAMP"),
        (LogicalType.DATE, r"DATE"),
        (LogicalType.INT, r"INT"),
        (LogicalType.FLOAT, r"REAL|FLOA|DOUB|NUMERIC|DECIMAL"),
        (LogicalType.TEXT, r"."),
    )

    @property
    def name(self) -> str:
        return "sqlite"

    @property
    def type_patterns(self) -> TypePatterns:
        return self._TYPES

    @property
    def supports_update_limit(self) -> bool:
        return False

    @property
    def retries_locks(self) -> bool:
        return True

    def quote(self, identifier: str) -> str:
        return '"' + identifier.replace('"', '""') + '"'

    def describe_sql(self, table: str) -> str:
        return "PRAGMA table_info('" + table.replace("'", "''") + "')"

    def table_exists_query(self) -> str:
        return "SELECT name FROM sqlite_master WHERE type='table' AND name = ?"

    def default_values_clause(self) -> str:
        return "DEFAULT VALUES"

    def limit_clause(self, start: int, limit: int | None) -> str:
        if limit is not None and start:
            return f" LIMIT {int(limit)} OFFSET {int(start)}"
        if limit is not None:
            return f" LIMIT {int(limit)}"
        if start:
            return f" LIMIT -1 OFFSET {int(start)}"
        return ""

    def translate(self, sql: str) -> str:
        return sql

    def is_lock_error(self, error: BaseException) -> bool:
        return is_lock_error(error)


class MySQLDialect:
    """Client/server dialect: backtick identifiers, ``DESCRIBE``, pyformat placeholders.

    Compatible with ``mysql.connector`` and ``PyMySQL`` (both accept
    ``%s`` and ``%(name)s``).
    """

    _TYPES = _patterns(
        (LogicalType.BOOL, r"^(tinyint\(1\)|bool|boolean|bit|int1)"),
        (LogicalType.INT, r"^(tinyint|smallint|mediumint|middleint|integer|int|bigint|year)"),
        (LogicalType.FLOAT, r"^(float|double|decimal|dec|numeric|real|fixed)"),
        (LogicalType.DATETIME, r"^(datetime|timestamp)"),
        (LogicalType.DATE, r"^date"),
        (LogicalType.ENUM, r"^enum\("),
        (LogicalType.TEXT, r"."),
    )

    @property
    def name(self) -> str:
        return "mysql"

    @property
    def type_patterns(self) -> TypePatterns:
        return self._TYPES

    @property
    def supports_update_limit(self) -> bool:
        return True

    @property
    def retries_locks(self) -> bool:
        return False

    def quote(self, identifier: str) -> str:
        return "`" + identifier.replace("`", "``") + "`"

    def describe_sql(self, table: str) -> str:
        return "DESCRIBE " + self.quote(table)

    def table_exists_query(self) -> str:
        return (
            "SELECT TABLE_NAME FROM INFORMATION_SCHEMA.TABLES "
            "WHERE TABLE_SCHEMA = DATABASE() AND TABLE_NAME = ?"
        )

    def default_values_clause(self) -> str:
        return "() VALUES ()"

    def limit_clause(self, start: int, limit: int | None) -> str:
        if limit is not None and start:
            return f" LIMIT {int(start)}, {int(limit)}"
        if limit is not None:
            return f" LIMIT {int(limit)}"
        if start:
            return f" LIMIT {int(start)}, {_MAX_ROWS}"
        return ""

    def translate(self, sql: str) -> str:
        def _sub(match: re.Match[str]) -> str:
            token = match.group(0)
            if token == "?":
                return "%s"
            if match.group(1):
                return f"%({match.group(1)})s"
            return token

        return _PLACEHOLDER_RE.sub(_sub, sql)

    def is_lock_error(self, error: BaseException) -> bool:  # noqa: ARG002
        return False


# =========================================================================
# Registry
# =========================================================================

_DIALECTS: dict[str, Dialect] = {
    "sqlite": SQLiteDialect(),
    "mysql": MySQLDialect(),
    "mariadb": MySQLDialect(),
}


def get_dialect(db_type: str) -> Dialect:
    """Get a dialect by database type name.

    Raises:
        ConfigError: If ``db_type`` is not recognised.
    """
    key = db_type.lower() if isinstance(db_type, str) else db_type.value
    if key not in _DIALECTS:
        raise ConfigError(
            f"Unknown dialect '{db_type}'. Supported: {sorted(_DIALECTS)}"
        )
    return _DIALECTS[key]


def register_dialect(name: str, dialect: Dialect) -> None:
    """Register a custom dialect implementation (e.g. a test double)."""
    _DIALECTS[name.lower()] = dialect


__all__ = [
    "Dialect",
    "SQLiteDialect",
    "MySQLDialect",
    "get_dialect",
    "register_dialect",
    "param_name",
]
