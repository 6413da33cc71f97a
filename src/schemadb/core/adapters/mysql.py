"""MySQL database adapter (client/server dialect).

Uses ``mysql.connector`` from the ``mysql-connector-python`` package on a
single connection; the query layer assumes one physical connection per
logical database, so no pool is created.

Install the driver::

    pip install mysql-connector-python
    # or:  pip install schemadb[mysql]

This adapter is import-guarded: if ``mysql.connector`` is not installed
a clear :class:`~schemadb.core.errors.ConfigError` is raised at
``connect()`` time.
"""

from __future__ import annotations

from typing import Any

from schemadb.core.enums import LogicalType
from schemadb.core.errors import ConfigError, DatabaseConnectionError
from schemadb.core.logging import get_logger

from .base import DatabaseAdapter, Statement
from .types import DatabaseConfig, DatabaseType

logger = get_logger(__name__)

# mysql.connector FieldType codes → logical type for query results.
_FIELD_TYPES: dict[int, LogicalType] = {
    16: LogicalType.BOOL,  # BIT
    1: LogicalType.INT,  # TINY
    2: LogicalType.INT,  # SHORT
    3: LogicalType.INT,  # LONG
    8: LogicalType.INT,  # LONGLONG
    9: LogicalType.INT,  # INT24
    13: LogicalType.INT,  # YEAR
    4: LogicalType.FLOAT,  # FLOAT
    5: LogicalType.FLOAT,  # DOUBLE
    0: LogicalType.FLOAT,  # DECIMAL
    246: LogicalType.FLOAT,  # NEWDECIMAL
    10: LogicalType.DATE,  # DATE
    14: LogicalType.DATE,  # NEWDATE
    7: LogicalType.DATETIME,  # TIMESTAMP
    12: LogicalType.DATETIME,  # DATETIME
}


class MySQLAdapter(DatabaseAdapter):
    """MySQL / MariaDB database adapter.

    Cursors are buffered so a streaming cursor and further statements can
    share the one connection.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 3306,
        database: str = "",
        username: str | None = None,
        password: str | None = None,
        *,
        charset: str = "utf8mb4",
        config: DatabaseConfig | None = None,
        **kwargs: Any,
    ):
        if config is None:
            config = DatabaseConfig(
                db_type=DatabaseType.MYSQL,
                host=host,
                port=port,
                database=database,
                username=username,
                password=password,
                charset=charset,
                options=kwargs,
            )
        super().__init__(config)

    def connect(self) -> None:
        """Connect to MySQL database."""
        if self._conn is not None:
            return
        try:
            import mysql.connector
        except ImportError:
            raise ConfigError(
                "mysql-connector-python is required for MySQL. "
                "Install with: pip install mysql-connector-python"
            ) from None

        try:
            self._conn = mysql.connector.connect(
                host=self._config.host,
                port=self._config.port,
                database=self._config.database or None,
                user=self._config.username,
                password=self._config.password,
                charset=self._config.charset,
                autocommit=True,
                **self._config.options,
            )
        except mysql.connector.Error as e:
            raise DatabaseConnectionError(
                f"Failed to connect to MySQL: {e}",
                cause=e,
            ).with_context(dialect="mysql", host=self._config.host) from e

        logger.debug("connected", dialect="mysql", host=self._config.host, database=self._config.database)

    def new_cursor(self) -> Any:
        return self.get_connection().cursor(buffered=True)

    def begin(self) -> None:
        self.get_connection().start_transaction()

    def last_insert_id(self) -> int | None:
        cursor = self.new_cursor()
        try:
            cursor.execute("SELECT LAST_INSERT_ID()")
            row = cursor.fetchone()
        finally:
            cursor.close()
        return int(row[0]) if row and row[0] is not None else None

    def column_types(self, statement: Statement) -> dict[str, LogicalType]:
        description = statement.description or ()
        types: dict[str, LogicalType] = {}
        for column in description:
            logical = _FIELD_TYPES.get(column[1])
            if logical is not None:
                types[column[0]] = logical
        return types


__all__ = [
    "MySQLAdapter",
]
