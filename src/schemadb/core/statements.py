"""
Statement cache: prepared statements keyed by SQL text, one frame per transaction depth.

Manifesto:
    Preparing the same SQL over and over is wasted work, but a statement
    prepared inside a transaction must not leak into the code that runs
    after it, and two cursors over the same SQL text must never share a
    handle (the second ``execute`` would rebind the first one's
    parameters). The cache therefore keeps one dict per transaction
    depth and hands statements *out* of the cache while a cursor owns
    them.

Architecture:
    ::

        depth 0   {sql: Statement, ...}      ← saved on push()
        depth 1   {sql: Statement, ...}      ← current frame
                      │
            acquire ──┤ hit: same handle     miss: adapter.prepare(sql)
            checkout ─┤ remove from frame, caller owns it
            release ──┘ close cursor, put back into the *current* frame

Features:
    - ``push()`` / ``pop()`` scope statements to a transaction attempt
    - Release of a closed or already-cached statement is a no-op
    - ``reuse=False`` prepares a fresh statement for every call

Examples:
    >>> cache = StatementCache(adapter)
    >>> stmt = cache.acquire("SELECT 1")
    >>> cache.acquire("SELECT 1") is stmt
    True

Tags:
    statement-cache, prepared-statement, transaction-scope, schemadb

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import weakref

from schemadb.core.adapters.base import DatabaseAdapter, Statement
from schemadb.core.logging import get_logger

logger = get_logger(__name__)


class StatementCache:
    """Per-handle prepared statement store scoped by transaction depth."""

    def __init__(self, adapter: DatabaseAdapter, reuse: bool = True):
        self._adapter = adapter
        self._reuse = reuse
        self._frame: dict[str, Statement] = {}
        self._stack: list[dict[str, Statement]] = []
        self._checked_out: weakref.WeakSet[Statement] = weakref.WeakSet()

    @property
    def depth(self) -> int:
        """Number of saved frames (0 outside any transaction)."""
        return len(self._stack)

    @property
    def reuse(self) -> bool:
        return self._reuse

    def acquire(self, sql: str) -> Statement:
        """The cached statement for ``sql`` at the current depth, prepared on a miss."""
        if self._reuse:
            statement = self._frame.get(sql)
            if statement is not None and not statement.closed:
                return statement

        statement = self._adapter.prepare(sql)
        logger.debug("statement_prepared", sql=sql, depth=self.depth)
        if self._reuse:
            self._frame[sql] = statement
        return statement

    def checkout(self, sql: str, statement: Statement | None = None) -> Statement | None:
        """Remove ``sql``'s statement from the cache without closing it.

        The removed statement, or ``statement`` when the frame holds none,
        stays owned by the caller until ``release()`` and is still closed
        by ``close_all()``.
        """
        removed = self._frame.pop(sql, None)
        owned = removed if removed is not None else statement
        if owned is not None:
            self._checked_out.add(owned)
        return removed

    def release(self, statement: Statement) -> None:
        """Discard ``statement``'s pending results and return it to the current frame."""
        self._checked_out.discard(statement)
        if statement.closed:
            return
        current = self._frame.get(statement.sql)
        if current is statement:
            return

        statement.close_cursor()
        if not self._reuse or current is not None:
            statement.close()
            return
        self._frame[statement.sql] = statement

    def push(self) -> None:
        """Save the current frame and start an empty one."""
        self._stack.append(self._frame)
        self._frame = {}

    def pop(self) -> None:
        """Close the current frame's statements and restore the saved frame."""
        self._close_frame(self._frame)
        self._frame = self._stack.pop() if self._stack else {}

    def close_all(self) -> None:
        """Close every statement at every depth, including checked-out ones."""
        for statement in list(self._checked_out):
            statement.close()
        self._checked_out.clear()
        self._close_frame(self._frame)
        for frame in self._stack:
            self._close_frame(frame)
        self._frame = {}
        self._stack = []

    @staticmethod
    def _close_frame(frame: dict[str, Statement]) -> None:
        for statement in frame.values():
            statement.close()
        frame.clear()

    def __contains__(self, sql: object) -> bool:
        return sql in self._frame

    def __len__(self) -> int:
        return len(self._frame)

    def __repr__(self) -> str:
        return f"StatementCache(depth={self.depth}, cached={len(self._frame)})"


__all__ = [
    "StatementCache",
]
