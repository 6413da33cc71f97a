"""
Shared pytest fixtures for schemadb tests.

This module provides:
- In-memory ``Database`` handles with a small ``users`` / ``typed`` schema
- A temporary SQLite file path and a lock-holding second connection
- A fake clock for patching the retry loops
- structlog reset between tests

Usage:
    def test_something(db):
        db.insert("users", {"name": "Fred", "email": "fred@fred.com"})
"""

from __future__ import annotations

import sqlite3
from collections.abc import Generator
from pathlib import Path

import pytest
import structlog

from schemadb.core.database import Database

USERS_DDL = """
CREATE TABLE users (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    email TEXT,
    Age INT NOT NULL DEFAULT 18
)
"""

TYPED_DDL = """
CREATE TABLE typed (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    flag BOOLEAN NOT NULL,
    maybe_flag BOOLEAN,
    count INT NOT NULL,
    ratio REAL NOT NULL,
    label VARCHAR(20) NOT NULL,
    born DATE,
    seen DATETIME,
    due DATE NOT NULL DEFAULT '2000-01-01'
)
"""

PAIRS_DDL = """
CREATE TABLE pairs (
    a INT NOT NULL,
    b INT NOT NULL,
    note TEXT,
    PRIMARY KEY (a, b)
)
"""


@pytest.fixture(autouse=True)
def _reset_structlog() -> Generator[None, None, None]:
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def db() -> Generator[Database, None, None]:
    """Connected in-memory database with the test schema."""
    database = Database(":memory:")
    database.connect()
    for ddl in (USERS_DDL, TYPED_DDL, PAIRS_DDL):
        database.execute_and_close(ddl)
    yield database
    database.disconnect()


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Path of a SQLite file with the test schema."""
    path = tmp_path / "test.db"
    database = Database(f"sqlite:{path}")
    for ddl in (USERS_DDL, TYPED_DDL, PAIRS_DDL):
        database.execute_and_close(ddl)
    database.disconnect()
    return path


class FakeClock:
    """Stand-in for the ``time`` module: ``sleep`` advances ``monotonic``.

    ``on_sleep`` (if set) is called with the number of sleeps so far.
    """

    def __init__(self):
        self.now = 0.0
        self.sleeps: list[float] = []
        self.on_sleep = None

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        if self.on_sleep is not None:
            self.on_sleep(len(self.sleeps))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def blocker(db_path: Path) -> Generator[sqlite3.Connection, None, None]:
    """A second connection holding the write lock on ``db_path``."""
    conn = sqlite3.connect(db_path, isolation_level=None)
    conn.execute("BEGIN IMMEDIATE")
    yield conn
    if conn.in_transaction:
        conn.execute("ROLLBACK")
    conn.close()
