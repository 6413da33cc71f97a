"""Generate a ``@dataclass`` source for a table's rows.

The generated class can be passed as ``row_type`` to ``Database.find`` /
``get_rows`` and as the row of ``insert`` / ``update`` / ``save``.
"""

from __future__ import annotations

import keyword
import re

from schemadb.core.coercion import coerce_for_read
from schemadb.core.database import Database
from schemadb.core.enums import LogicalType
from schemadb.core.schema import ColumnDescriptor

_PY_TYPES = {
    LogicalType.BOOL: "bool",
    LogicalType.INT: "int",
    LogicalType.FLOAT: "float",
    LogicalType.DATE: "date",
    LogicalType.DATETIME: "datetime",
    LogicalType.ENUM: "str",
    LogicalType.TEXT: "str",
}

# Server-side default expressions have no Python literal.
_EXPRESSION_DEFAULT = re.compile(r"^(current_|now\b|localtime|uuid)|\(", re.IGNORECASE)


def class_name_for(table: str) -> str:
    """``order_items`` → ``OrderItems``."""
    name = "".join(part.capitalize() for part in re.split(r"[\s_\-]+", table) if part)
    name = re.sub(r"\W", "", name)
    if not name or name[0].isdigit():
        name = "T" + name
    return name


def field_name_for(column: str) -> str:
    name = re.sub(r"\W", "_", column)
    if not name or name[0].isdigit():
        name = "_" + name
    if keyword.iskeyword(name):
        name += "_"
    return name


def _default_literal(col: ColumnDescriptor) -> str | None:
    """Python source for the field default, or None when the field is required."""
    if col.has_default:
        value = col.default_value
        if isinstance(value, str) and _EXPRESSION_DEFAULT.search(value):
            return "None"
        try:
            value = coerce_for_read(value, col.logical_type)
        except (TypeError, ValueError):
            return "None"
        # Generated modules import the date/datetime classes, not the module.
        return repr(value).removeprefix("datetime.")
    if col.is_nullable or col.is_auto_increment:
        return "None"
    return None


def _comment(col: ColumnDescriptor) -> str:
    parts = [col.original_type or col.logical_type.value, "NULL" if col.is_nullable else "NOT NULL"]
    if col.is_primary_key:
        parts.append("PRIMARY")
    if col.is_auto_increment:
        parts.append("AUTO_INCREMENT")
    return " ".join(parts)


def generate_dataclass(
    db: Database,
    table: str,
    class_name: str | None = None,
    type_comments: bool = True,
) -> str:
    """Python source of a dataclass with one field per column of ``table``.

    Required fields (NOT NULL, no default, not auto-increment) come first
    so the class is valid; every other field defaults to its column
    default or None. With ``type_comments`` each field is annotated with
    the backend type and flags.
    """
    schema = db.describe(table)
    class_name = class_name or class_name_for(table)

    required: list[tuple[str, ColumnDescriptor]] = []
    optional: list[tuple[str, ColumnDescriptor]] = []
    for col in schema.columns:
        default = _default_literal(col)
        py_type = _PY_TYPES[col.logical_type]
        if default is None:
            required.append((f"    {field_name_for(col.name)}: {py_type}", col))
        else:
            if default == "None":
                py_type += " | None"
            optional.append((f"    {field_name_for(col.name)}: {py_type} = {default}", col))

    fields = required + optional
    width = max((len(code) for code, _ in fields), default=0)
    lines = []
    for code, col in fields:
        lines.append(f"{code.ljust(width)}  # {_comment(col)}" if type_comments else code)

    imports = ["from dataclasses import dataclass"]
    temporal = sorted(
        {_PY_TYPES[c.logical_type] for c in schema.columns if c.logical_type.is_temporal}
    )
    if temporal:
        imports.append(f"from datetime import {', '.join(temporal)}")

    header = [
        f"# Generated from the {schema.table} table.",
        "from __future__ import annotations",
        "",
        *imports,
        "",
        "",
        "@dataclass",
        f"class {class_name}:",
    ]
    return "\n".join(header + (lines or ["    pass"])) + "\n"


__all__ = [
    "class_name_for",
    "field_name_for",
    "generate_dataclass",
]
