"""Database adapters -- PDO-style primitives over DB-API drivers.

Manifesto:
    The query layer needs prepare / bind / execute / fetch / close-cursor,
    explicit transactions and the last generated id. Each adapter maps
    those onto one driver. The MySQL driver is **import-guarded**: it is
    only required at ``connect()`` time::

        pip install schemadb[mysql]          # mysql-connector-python

Architecture::

    DatabaseAdapter (base.py)        Abstract base: connect/prepare/begin/commit
        |-- SQLiteAdapter            stdlib sqlite3 (always available)
        |-- MySQLAdapter             mysql.connector (optional)
    Statement (base.py)              Prepared statement handle keyed by SQL text

    AdapterRegistry (registry.py)    DatabaseType -> adapter class
    DatabaseConfig (types.py)        Connection + retry configuration
    DatabaseType (types.py)          Enum of supported backends

Guardrails:
    ❌ ``db.execute("SELECT * FROM t WHERE id=" + user_input)``
    ✅ ``db.execute("SELECT * FROM t WHERE id=?", [user_input])``
    ❌ Importing optional drivers at module scope
    ✅ Import-guarded at ``connect()`` time with clear ``ConfigError``

Tags:
    schemadb, database, adapters, sqlite, mysql, import-guarded

Doc-Types:
    package-overview, architecture-map, module-index
"""

from schemadb.core.dialect import Dialect, get_dialect

from .base import DatabaseAdapter, Statement
from .mysql import MySQLAdapter
from .registry import AdapterRegistry, adapter_registry, get_adapter
from .sqlite import SQLiteAdapter
from .types import DatabaseConfig, DatabaseType

__all__ = [
    # Types
    "DatabaseType",
    "DatabaseConfig",
    # Abstractions
    "Dialect",
    "get_dialect",
    "DatabaseAdapter",
    "Statement",
    # Implementations
    "SQLiteAdapter",
    "MySQLAdapter",
    # Registry
    "AdapterRegistry",
    "adapter_registry",
    "get_adapter",
]
