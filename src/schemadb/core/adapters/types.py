"""Database types and configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from schemadb.core.errors import ConfigError
from schemadb.core.settings import (
    DEFAULT_EXECUTE_RETRY_WAIT,
    DEFAULT_LOCK_TIMEOUT,
    DEFAULT_MAX_TRANSACTION_DEPTH,
    DEFAULT_TRANSACTION_RETRY_WAIT,
    DatabaseSettings,
)


class DatabaseType(str, Enum):
    """Supported database types."""

    SQLITE = "sqlite"
    MYSQL = "mysql"


@dataclass
class DatabaseConfig:
    """
    Configuration for one logical database.

    Different fields are used by different database types; the retry and
    caching knobs apply to both.
    """

    db_type: DatabaseType = DatabaseType.SQLITE

    # SQLite
    path: str = ":memory:"

    # MySQL / MariaDB
    host: str = "localhost"
    port: int = 3306
    database: str = ""
    username: str | None = None
    password: str | None = None
    charset: str = "utf8mb4"

    # Query layer behaviour
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT
    transaction_retry_wait: float = DEFAULT_TRANSACTION_RETRY_WAIT
    execute_retry_wait: float = DEFAULT_EXECUTE_RETRY_WAIT
    max_transaction_depth: int = DEFAULT_MAX_TRANSACTION_DEPTH
    reuse_statements: bool = True

    # Extra options (driver-specific keyword arguments to connect())
    options: dict[str, Any] = field(default_factory=dict)

    # The DSN this config was parsed from, for diagnostics
    url: str | None = None

    @classmethod
    def from_value(cls, value: Any = None, **overrides: Any) -> DatabaseConfig:
        """Build a config from a DSN string, a mapping or a ``DatabaseSettings``."""
        from schemadb.core.connection import resolve_config

        return resolve_config(value, **overrides)

    @classmethod
    def from_settings(cls, settings: DatabaseSettings) -> DatabaseConfig:
        """Build a config from environment settings (DSN parsed by ``resolve_config``)."""
        from schemadb.core.connection import resolve_config

        return resolve_config(
            {
                "url": settings.url,
                "user": settings.user,
                "password": settings.password,
                "options": dict(settings.options),
                "lock_timeout": settings.lock_timeout,
                "transaction_retry_wait": settings.transaction_retry_wait,
                "execute_retry_wait": settings.execute_retry_wait,
                "max_transaction_depth": settings.max_transaction_depth,
                "reuse_statements": settings.reuse_statements,
            }
        )

    def to_connection_string(self, *, mask_password: bool = True) -> str:
        """Connection string for display; the password is masked by default."""
        match self.db_type:
            case DatabaseType.SQLITE:
                return f"sqlite:{self.path}"
            case DatabaseType.MYSQL:
                password = "***" if mask_password and self.password else (self.password or "")
                auth = f"{self.username or ''}:{password}@" if self.username else ""
                return f"mysql://{auth}{self.host}:{self.port}/{self.database}"
            case _:
                raise ConfigError(f"Connection string not supported for: {self.db_type}")


__all__ = [
    "DatabaseType",
    "DatabaseConfig",
]
