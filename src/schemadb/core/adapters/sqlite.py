"""SQLite database adapter (embedded-file dialect)."""

from __future__ import annotations

import sqlite3
from typing import Any

from schemadb.core.errors import DatabaseConnectionError
from schemadb.core.logging import get_logger

from .base import DatabaseAdapter
from .types import DatabaseConfig, DatabaseType

logger = get_logger(__name__)


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite database adapter.

    Uses the built-in sqlite3 module in autocommit mode; transactions
    are opened explicitly with ``BEGIN``. The driver's own busy handler
    defaults to zero so lock contention surfaces immediately and the
    query layer's retry loop decides how long to wait.
    """

    def __init__(
        self,
        path: str = ":memory:",
        *,
        timeout: float = 0.0,
        config: DatabaseConfig | None = None,
        **kwargs: Any,
    ):
        if config is None:
            config = DatabaseConfig(
                db_type=DatabaseType.SQLITE,
                path=path,
                options=kwargs,
            )
        super().__init__(config)
        self._timeout = float(config.options.get("timeout", timeout))

    def connect(self) -> None:
        """Connect to SQLite database."""
        if self._conn is not None:
            return

        path = self._config.path or ":memory:"
        uri = path.startswith("file:")

        try:
            conn = sqlite3.connect(
                path,
                timeout=self._timeout,
                check_same_thread=False,
                isolation_level=None,
                uri=uri,
            )
            conn.execute("PRAGMA foreign_keys = ON")
        except sqlite3.Error as e:
            raise DatabaseConnectionError(
                f"Failed to connect to SQLite: {e}",
                cause=e,
            ).with_context(dialect="sqlite", path=path) from e

        self._conn = conn
        logger.debug("connected", dialect="sqlite", path=path)

    def new_cursor(self) -> sqlite3.Cursor:
        return self.get_connection().cursor()

    def begin(self) -> None:
        self.get_connection().execute("BEGIN")

    def commit(self) -> None:
        conn = self.get_connection()
        if conn.in_transaction:
            conn.execute("COMMIT")

    def rollback(self) -> None:
        conn = self.get_connection()
        if conn.in_transaction:
            conn.execute("ROLLBACK")

    def last_insert_id(self) -> int | None:
        row = self.get_connection().execute("SELECT last_insert_rowid()").fetchone()
        return int(row[0]) if row and row[0] is not None else None

    @property
    def raw(self) -> sqlite3.Connection:
        """Access the underlying ``sqlite3.Connection`` (e.g. for pragmas)."""
        return self.get_connection()


__all__ = [
    "SQLiteAdapter",
]
