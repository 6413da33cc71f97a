"""Database adapter registry and factory.

Manifesto:
    Consumers should never hard-code adapter class names. The registry
    maps ``DatabaseType`` strings to adapter classes and ``get_adapter()``
    builds a configured (not yet connected) instance from a
    ``DatabaseConfig``.

Features:
    - ``AdapterRegistry`` with pre-registered ``sqlite`` / ``mysql``
    - ``register()`` for custom adapters or test doubles
    - ``get_adapter()`` factory: config → adapter

Tags:
    schemadb, database, registry, factory

Doc-Types:
    api-reference
"""

from __future__ import annotations

from schemadb.core.errors import ConfigError

from .base import DatabaseAdapter
from .mysql import MySQLAdapter
from .sqlite import SQLiteAdapter
from .types import DatabaseConfig


class AdapterRegistry:
    """
    Registry for database adapter classes.

    Pre-registered adapters:
    - ``sqlite`` — :class:`SQLiteAdapter`
    - ``mysql`` / ``mariadb`` — :class:`MySQLAdapter`
    """

    def __init__(self):
        self._factories: dict[str, type[DatabaseAdapter]] = {}
        self._register_defaults()

    def _register_defaults(self) -> None:
        self._factories["sqlite"] = SQLiteAdapter
        self._factories["mysql"] = MySQLAdapter
        self._factories["mariadb"] = MySQLAdapter  # Alias

    def register(self, name: str, adapter_class: type[DatabaseAdapter]) -> None:
        """Register an adapter class."""
        self._factories[name.lower()] = adapter_class

    def create(self, config: DatabaseConfig) -> DatabaseAdapter:
        """Create an adapter for ``config.db_type``."""
        name = config.db_type.value.lower()
        if name not in self._factories:
            raise ConfigError(f"Unknown database adapter: {name}")
        return self._factories[name](config=config)

    def list_adapters(self) -> list[str]:
        """List registered adapter names."""
        return sorted(self._factories.keys())


# Global registry
adapter_registry = AdapterRegistry()


def get_adapter(config: DatabaseConfig) -> DatabaseAdapter:
    """
    Get a database adapter for a config.

    Usage:
        adapter = get_adapter(DatabaseConfig(path="data.db"))
    """
    return adapter_registry.create(config)


__all__ = [
    "AdapterRegistry",
    "adapter_registry",
    "get_adapter",
]
