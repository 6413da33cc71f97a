"""Record capability: one interface over dict rows and attribute objects.

``insert`` writes the generated id back into the caller's row and
``update`` reads primary keys out of it. Rows may be plain dicts (or any
``MutableMapping``) or objects with attributes, such as the dataclasses
``schemadb codegen`` emits. ``as_record`` wraps either in the same small
interface so the executor never checks which one it has.
"""

from __future__ import annotations

from collections.abc import Iterator, MutableMapping
from dataclasses import fields, is_dataclass
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Record(Protocol):
    """Column name → value access over a caller-supplied row."""

    def get(self, name: str, default: Any = None) -> Any: ...

    def set(self, name: str, value: Any) -> None: ...

    def has(self, name: str) -> bool: ...

    def keys(self) -> list[str]: ...


class MappingRecord:
    """Record backed by a ``MutableMapping``; lookups are exact, then case-insensitive."""

    __slots__ = ("row",)

    def __init__(self, row: MutableMapping[str, Any]):
        self.row = row

    def _key(self, name: str) -> str | None:
        if name in self.row:
            return name
        lowered = name.lower()
        return next((k for k in self.row if isinstance(k, str) and k.lower() == lowered), None)

    def get(self, name: str, default: Any = None) -> Any:
        key = self._key(name)
        return self.row[key] if key is not None else default

    def set(self, name: str, value: Any) -> None:
        self.row[self._key(name) or name] = value

    def has(self, name: str) -> bool:
        return self._key(name) is not None

    def keys(self) -> list[str]:
        return [k for k in self.row if isinstance(k, str)]

    def items(self) -> Iterator[tuple[str, Any]]:
        for key in self.keys():
            yield key, self.row[key]


class ObjectRecord:
    """Record backed by an object's attributes.

    Dataclass fields are the keys of a dataclass instance; public
    entries of ``__dict__`` are the keys of any other object.
    """

    __slots__ = ("obj",)

    def __init__(self, obj: Any):
        self.obj = obj

    def keys(self) -> list[str]:
        if is_dataclass(self.obj):
            return [f.name for f in fields(self.obj)]
        return [k for k in getattr(self.obj, "__dict__", {}) if not k.startswith("_")]

    def _attr(self, name: str) -> str | None:
        if name in self.keys():
            return name
        lowered = name.lower()
        return next((k for k in self.keys() if k.lower() == lowered), None)

    def get(self, name: str, default: Any = None) -> Any:
        attr = self._attr(name)
        return getattr(self.obj, attr, default) if attr is not None else default

    def set(self, name: str, value: Any) -> None:
        setattr(self.obj, self._attr(name) or name, value)

    def has(self, name: str) -> bool:
        return self._attr(name) is not None

    def items(self) -> Iterator[tuple[str, Any]]:
        for key in self.keys():
            yield key, getattr(self.obj, key)


def as_record(row: Any) -> MappingRecord | ObjectRecord:
    """Wrap ``row`` as a record; records are returned unchanged."""
    if isinstance(row, (MappingRecord, ObjectRecord)):
        return row
    if isinstance(row, MutableMapping):
        return MappingRecord(row)
    if isinstance(row, (str, bytes, int, float, list, tuple, set)) or row is None:
        raise TypeError(f"Cannot use {type(row).__name__} as a row")
    return ObjectRecord(row)


__all__ = [
    "Record",
    "MappingRecord",
    "ObjectRecord",
    "as_record",
]
