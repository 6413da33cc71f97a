"""schemadb core -- schema-aware query execution over DB-API drivers.

Manifesto:
    Application code wants to say ``db.insert("users", row)`` and get
    the generated id back, read rows whose dates are dates and whose
    booleans are booleans, and run a transaction that survives a busy
    SQLite file. ``schemadb.core`` provides exactly that on top of
    ``sqlite3`` and ``mysql.connector``, and nothing more: no query
    builder, no migrations, no pool.

    - **One handle per database:** connection, catalog, cache and depth
      live on a ``Database`` instance, never in globals
    - **Schema-driven coercion:** column metadata decides how values are
      written and read
    - **Bounded retry:** lock contention on the embedded engine is retried
      until a timeout, everything else fails fast

Architecture::

    Layer 1 -- Types & Errors
        errors.py          SchemaDBError hierarchy (Schema/Coercion/Query/...)
        enums.py           LogicalType, BindKind, CursorState
        temporal.py        date vs datetime helpers, free-form parsing
        records.py         Record capability over dicts and objects

    Layer 2 -- Backend
        settings.py        DatabaseSettings (pydantic-settings, SCHEMADB_*)
        dialect.py         SQLiteDialect / MySQLDialect
        protocols.py       DB-API connection/cursor protocols
        adapters/          SQLiteAdapter, MySQLAdapter, Statement
        connection.py      DSN parsing, ConnectionState

    Layer 3 -- Query Engine
        schema.py          SchemaCatalog, TableSchema, ColumnDescriptor
        coercion.py        coerce_for_write / coerce_for_read / bind_kind
        statements.py      StatementCache (per transaction depth)
        executor.py        QueryExecutor (bind, run, lock retry)
        transaction.py     TransactionManager (depth guard, retry)
        cursor.py          RowCursor (single-pass, auto-release)
        database.py        Database handle + open_database()

    Cross-Cutting
        logging.py         structlog configuration

Tags:
    schemadb, core, query-layer, sqlite, mysql, coercion

Doc-Types:
    package-overview, architecture-map, module-index
"""

from schemadb.core.adapters import (
    DatabaseAdapter,
    DatabaseConfig,
    DatabaseType,
    MySQLAdapter,
    SQLiteAdapter,
    Statement,
)
from schemadb.core.coercion import bind_kind, coerce_for_read, coerce_for_write, coerce_row
from schemadb.core.connection import ConnectionState, create_adapter, resolve_config
from schemadb.core.cursor import RowCursor
from schemadb.core.database import Database, open_database
from schemadb.core.dialect import Dialect, MySQLDialect, SQLiteDialect, get_dialect, register_dialect
from schemadb.core.enums import BindKind, CursorState, LogicalType
from schemadb.core.errors import (
    CoercionError,
    ConfigError,
    DatabaseConnectionError,
    DatabaseLockedError,
    ErrorCategory,
    ErrorContext,
    IterationError,
    QueryError,
    SchemaDBError,
    SchemaError,
    TransactionError,
    is_lock_error,
    is_retryable,
)
from schemadb.core.executor import QueryExecutor
from schemadb.core.logging import configure_logging, get_logger
from schemadb.core.records import MappingRecord, ObjectRecord, Record, as_record
from schemadb.core.schema import ColumnDescriptor, SchemaCatalog, TableSchema
from schemadb.core.settings import DatabaseSettings, get_settings
from schemadb.core.statements import StatementCache
from schemadb.core.temporal import format_temporal, from_timestamp, parse_temporal
from schemadb.core.transaction import TransactionManager

__all__ = [
    # Handle
    "Database",
    "open_database",
    # Engine
    "SchemaCatalog",
    "TableSchema",
    "ColumnDescriptor",
    "StatementCache",
    "QueryExecutor",
    "TransactionManager",
    "RowCursor",
    # Coercion
    "coerce_for_write",
    "coerce_for_read",
    "coerce_row",
    "bind_kind",
    "parse_temporal",
    "format_temporal",
    "from_timestamp",
    # Records
    "Record",
    "MappingRecord",
    "ObjectRecord",
    "as_record",
    # Backend
    "DatabaseAdapter",
    "DatabaseConfig",
    "DatabaseType",
    "SQLiteAdapter",
    "MySQLAdapter",
    "Statement",
    "Dialect",
    "SQLiteDialect",
    "MySQLDialect",
    "get_dialect",
    "register_dialect",
    "ConnectionState",
    "create_adapter",
    "resolve_config",
    "DatabaseSettings",
    "get_settings",
    # Enums
    "LogicalType",
    "BindKind",
    "CursorState",
    # Errors
    "SchemaDBError",
    "ErrorCategory",
    "ErrorContext",
    "ConfigError",
    "DatabaseConnectionError",
    "SchemaError",
    "CoercionError",
    "QueryError",
    "DatabaseLockedError",
    "TransactionError",
    "IterationError",
    "is_lock_error",
    "is_retryable",
    # Logging
    "configure_logging",
    "get_logger",
]
