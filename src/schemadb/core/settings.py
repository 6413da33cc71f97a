"""Environment-driven connection settings.

``DatabaseSettings`` reads the connection parameters the query layer
consumes (URL, credentials, driver options, lock timeout) from
``SCHEMADB_*`` environment variables or a ``.env`` file.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** Type-checked at startup, not at first query
    - **Environment-driven:** ``SCHEMADB_URL=sqlite:app.db`` is enough
    - **Sensible defaults:** 30 s lock timeout, 10 nested levels max

Examples:
    >>> from schemadb.core.settings import DatabaseSettings
    >>> settings = DatabaseSettings(url="sqlite::memory:")
    >>> settings.lock_timeout
    30.0

Tags:
    settings, configuration, pydantic, environment, schemadb

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_LOCK_TIMEOUT = 30.0
DEFAULT_TRANSACTION_RETRY_WAIT = 0.005
DEFAULT_EXECUTE_RETRY_WAIT = 0.01
DEFAULT_MAX_TRANSACTION_DEPTH = 10


class DatabaseSettings(BaseSettings):
    """Connection settings for one logical database.

    Fields
    ──────
    url                     : DSN (``sqlite:path.db``, ``mysql:host=..;dbname=..``, ``mysql://..``)
    user / password         : Credentials for the client/server dialect
    options                 : Extra keyword arguments passed to the driver's connect()
    lock_timeout            : Seconds to keep retrying "database is locked"
    transaction_retry_wait  : Pause between whole-transaction retries
    execute_retry_wait      : Pause between single-statement retries
    max_transaction_depth   : Hard ceiling on nesting depth
    reuse_statements        : Cache prepared statements by SQL text
    log_level               : structlog level for ``schemadb`` CLI runs
    """

    model_config = SettingsConfigDict(
        env_prefix="SCHEMADB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    url: str = ":memory:"
    user: str | None = None
    password: str | None = None
    options: dict[str, Any] = Field(default_factory=dict)

    lock_timeout: float = Field(default=DEFAULT_LOCK_TIMEOUT, ge=0)
    transaction_retry_wait: float = Field(default=DEFAULT_TRANSACTION_RETRY_WAIT, ge=0)
    execute_retry_wait: float = Field(default=DEFAULT_EXECUTE_RETRY_WAIT, ge=0)
    max_transaction_depth: int = Field(default=DEFAULT_MAX_TRANSACTION_DEPTH, ge=1)
    reuse_statements: bool = True

    log_level: str = "WARNING"

    @field_validator("url")
    @classmethod
    def _url_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("url must not be empty")
        return value.strip()


def get_settings(**overrides: Any) -> DatabaseSettings:
    """Build settings from the environment, applying keyword overrides."""
    return DatabaseSettings(**{k: v for k, v in overrides.items() if v is not None})


__all__ = [
    "DEFAULT_LOCK_TIMEOUT",
    "DEFAULT_TRANSACTION_RETRY_WAIT",
    "DEFAULT_EXECUTE_RETRY_WAIT",
    "DEFAULT_MAX_TRANSACTION_DEPTH",
    "DatabaseSettings",
    "get_settings",
]
