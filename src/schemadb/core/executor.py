"""
Query executor: the single path every statement takes to the driver.

Manifesto:
    Binding, diagnostics and lock handling are decided in one place.
    Higher-level operations (``insert``, ``update``, ``find`` and the
    read helpers on :class:`~schemadb.core.database.Database`) only build
    SQL text and parameter collections and hand them to ``execute()``.

Architecture:
    ::

        execute(sql, params)
            │
            ├─ params: scalar → [scalar]; list/tuple → ?1..?n; mapping → :name
            ├─ StatementCache.acquire(sql)
            ├─ bind_kind(value) per parameter
            ├─ ConnectionState.record(sql, params)
            └─ Statement.execute()
                 ├─ ok ─────────────────────────────────► Statement
                 ├─ locked, depth 0, embedded dialect,
                 │  elapsed < lock_timeout ─► sleep(execute_retry_wait), again
                 ├─ locked otherwise ─────────────────► DatabaseLockedError
                 └─ anything else ────────────────────► QueryError(sql, params)

Tags:
    executor, query, binding, retry, schemadb

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from datetime import date
from decimal import Decimal
from typing import Any

from schemadb.core.adapters.base import Statement
from schemadb.core.coercion import bind_kind
from schemadb.core.connection import ConnectionState
from schemadb.core.dialect import Dialect
from schemadb.core.errors import DatabaseLockedError, QueryError, SchemaDBError
from schemadb.core.logging import get_logger
from schemadb.core.statements import StatementCache

logger = get_logger(__name__)

_SCALAR_PARAMS = (str, bytes, int, float, bool, Decimal, date)


def normalize_params(params: Any) -> list[Any] | dict[str, Any]:
    """Turn ``params`` into a positional list or a ``{name: value}`` dict."""
    if params is None:
        return []
    if isinstance(params, _SCALAR_PARAMS):
        return [params]
    if isinstance(params, Mapping):
        return {str(k).lstrip(":"): v for k, v in params.items()}
    if isinstance(params, (list, tuple)):
        return list(params)
    raise QueryError(f"Unsupported query parameters: {type(params).__name__}")


class QueryExecutor:
    """Executes SQL through the statement cache on one connection."""

    def __init__(self, state: ConnectionState, statements: StatementCache):
        self._state = state
        self._statements = statements

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def statements(self) -> StatementCache:
        return self._statements

    @property
    def dialect(self) -> Dialect:
        return self._state.adapter.dialect

    def execute(self, sql: str, params: Any = None) -> Statement:
        """Run ``sql`` and return its statement with results pending.

        The statement stays in the cache; read it before executing the
        same SQL again, or check it out of the cache.

        Raises:
            DatabaseLockedError: The embedded database stayed locked past
                the lock timeout.
            QueryError: The driver rejected the statement.
        """
        self._state.ensure_connected()
        values = normalize_params(params)

        statement = self._statements.acquire(sql)
        statement.clear_bindings()
        if isinstance(values, dict):
            for name, value in values.items():
                native, kind = bind_kind(value)
                statement.bind(name, native, kind)
        else:
            for position, value in enumerate(values, start=1):
                native, kind = bind_kind(value)
                statement.bind(position, native, kind)

        self._state.record(sql, values)
        self._run(statement, values)
        return statement

    def _run(self, statement: Statement, values: Any) -> None:
        config = self._state.adapter.config
        dialect = self.dialect
        started = time.monotonic()
        attempt = 0

        while True:
            attempt += 1
            try:
                statement.execute()
                return
            except SchemaDBError:
                raise
            except Exception as e:
                locked = dialect.retries_locks and dialect.is_lock_error(e)
                elapsed = time.monotonic() - started
                if locked and self._state.depth == 0 and elapsed < config.lock_timeout:
                    logger.debug(
                        "database_locked_retry",
                        sql=statement.sql,
                        attempt=attempt,
                        elapsed=round(elapsed, 3),
                    )
                    time.sleep(config.execute_retry_wait)
                    continue

                statement.close_cursor()
                logger.debug("query_failed", sql=statement.sql, error=str(e), attempts=attempt)
                error_cls = DatabaseLockedError if locked else QueryError
                raise error_cls(
                    f"{e} in {self._state.last_query()}",
                    sql=statement.sql,
                    params=values,
                    cause=e,
                ).with_context(dialect=dialect.name) from e

    def fetch_all(self, sql: str, params: Any = None) -> list[dict[str, Any]]:
        """All rows of ``sql`` as raw ``{column: value}`` dicts."""
        statement = self.execute(sql, params)
        try:
            return statement.fetchall()
        finally:
            statement.close_cursor()

    def execute_and_close(self, sql: str, params: Any = None) -> int:
        """Run ``sql``, discard any results and return the affected row count."""
        statement = self.execute(sql, params)
        try:
            return statement.rowcount
        finally:
            statement.close_cursor()


__all__ = [
    "QueryExecutor",
    "normalize_params",
]
