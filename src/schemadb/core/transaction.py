"""
Transaction manager: depth guard, begin/commit/rollback and lock retry.

Manifesto:
    A transaction body either commits as a whole or leaves no trace. When
    the embedded engine reports lock contention the *whole* body is run
    again as a fresh top-level attempt, never resumed, so partially
    applied work cannot be replayed on top of itself.

Architecture:
    ::

        transaction(body, error)
            │
            ├─ depth > 0 ─────────────────────► TransactionError("already in a transaction")
            ├─ depth += 1; depth > max ───────► TransactionError("too many nested transactions")
            │
            ├─ statements.push(), BEGIN
            ├─ body()
            │    ├─ ok:   COMMIT, depth -= 1, statements.pop() ─► result
            │    └─ fail: ROLLBACK, depth -= 1, statements.pop()
            │              ├─ locked and elapsed < lock_timeout ─► sleep, next attempt
            │              ├─ error callback ───────────────────► error(exc); None
            │              └─ otherwise ────────────────────────► raise

Examples:
    >>> manager.transaction(lambda: db.insert("users", {"name": "Fred"}))
    1

Tags:
    transaction, retry, rollback, nesting, schemadb

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from schemadb.core.adapters.types import DatabaseConfig
from schemadb.core.connection import ConnectionState
from schemadb.core.errors import TransactionError
from schemadb.core.logging import get_logger
from schemadb.core.statements import StatementCache

logger = get_logger(__name__)

T = TypeVar("T")


class TransactionManager:
    """Runs transaction bodies on one connection."""

    def __init__(self, state: ConnectionState, statements: StatementCache, config: DatabaseConfig):
        self._state = state
        self._statements = statements
        self._config = config

    @property
    def depth(self) -> int:
        return self._state.depth

    @property
    def in_transaction(self) -> bool:
        return self._state.depth > 0

    def _enter(self) -> None:
        if self._state.depth > 0:
            raise TransactionError("already in a transaction").with_context(depth=self._state.depth)
        self._state.depth += 1
        if self._state.depth > self._config.max_transaction_depth:
            self._state.depth -= 1
            raise TransactionError("too many nested transactions").with_context(
                depth=self._state.depth + 1, max_depth=self._config.max_transaction_depth
            )
        self._statements.push()
        try:
            self._state.adapter.begin()
        except BaseException:
            self._state.depth -= 1
            self._statements.pop()
            raise
        logger.debug("transaction_begin", depth=self._state.depth)

    def _leave(self) -> None:
        self._state.depth -= 1
        self._statements.pop()

    def _rollback(self) -> None:
        try:
            self._state.adapter.rollback()
        finally:
            self._leave()
        logger.debug("transaction_rollback", depth=self._state.depth)

    def transaction(
        self,
        body: Callable[[], T],
        error: Callable[[BaseException], Any] | None = None,
    ) -> T | None:
        """Run ``body`` in a transaction and return its result.

        On the embedded dialect a "database is locked" failure restarts the
        whole protocol until ``lock_timeout`` seconds have passed. Any other
        failure is rolled back and re-raised, or passed to ``error`` (in
        which case None is returned).

        Raises:
            TransactionError: Called while a transaction is already open.
        """
        self._state.ensure_connected()
        dialect = self._state.adapter.dialect
        started = time.monotonic()
        attempt = 0

        while True:
            attempt += 1
            self._enter()
            try:
                result = body()
                self._state.adapter.commit()
            except Exception as e:
                self._rollback()
                elapsed = time.monotonic() - started
                if (
                    dialect.retries_locks
                    and dialect.is_lock_error(e)
                    and elapsed < self._config.lock_timeout
                ):
                    logger.debug("transaction_retry", attempt=attempt, elapsed=round(elapsed, 3))
                    time.sleep(self._config.transaction_retry_wait)
                    continue
                if error is not None:
                    logger.debug("transaction_failed", error=str(e), attempts=attempt)
                    error(e)
                    return None
                raise
            except BaseException:
                self._rollback()
                raise

            self._leave()
            logger.debug("transaction_commit", attempts=attempt)
            return result

    @contextmanager
    def scope(self) -> Iterator[None]:
        """Single-attempt transaction as a context manager; no lock retry."""
        self._state.ensure_connected()
        self._enter()
        try:
            yield
            self._state.adapter.commit()
        except BaseException:
            self._rollback()
            raise
        self._leave()
        logger.debug("transaction_commit", attempts=1)


__all__ = [
    "TransactionManager",
]
