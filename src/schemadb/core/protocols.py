"""
Structural protocols for the DB-API objects the adapters wrap.

Manifesto:
    Adapters depend on the shape of a DB-API 2.0 connection and cursor,
    not on ``sqlite3`` or ``mysql.connector`` classes. Any object with
    these methods (including a test double) works.

Architecture:
    ::

        DBAPIConnection            DBAPICursor
        ├── cursor()               ├── execute(sql, params)
        ├── commit()               ├── fetchone() / fetchall()
        ├── rollback()             ├── description / rowcount / lastrowid
        └── close()                └── close()

Tags:
    protocol, connection, cursor, dbapi, schemadb

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class DBAPICursor(Protocol):
    """Minimal DB-API 2.0 cursor."""

    description: Any
    rowcount: int
    lastrowid: Any

    def execute(self, sql: str, params: Any = ...) -> Any: ...

    def fetchone(self) -> Any: ...

    def fetchall(self) -> list[Any]: ...

    def close(self) -> None: ...


@runtime_checkable
class DBAPIConnection(Protocol):
    """Minimal DB-API 2.0 connection."""

    def cursor(self, *args: Any, **kwargs: Any) -> Any: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...

    def close(self) -> None: ...


__all__ = [
    "DBAPICursor",
    "DBAPIConnection",
]
