"""
CLI utility helpers — output formatting and database handles.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import asdict
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from schemadb.core.database import Database
from schemadb.core.errors import SchemaDBError
from schemadb.core.settings import get_settings

console = Console()
err_console = Console(stderr=True)


# ── Database helper ──────────────────────────────────────────────────────


@contextmanager
def open_db(database: str | None = None) -> Iterator[Database]:
    """Connected handle for ``database``, or for ``SCHEMADB_URL`` when omitted.

    Query-layer errors are printed and turned into exit code 1.
    """
    try:
        db = Database(database) if database else Database(get_settings())
        with db:
            yield db
    except SchemaDBError as e:
        fail(e)


def fail(error: SchemaDBError) -> None:
    err_console.print(f"[bold red]Error[/bold red] ({error.category.value}): {escape(error.message)}")
    raise typer.Exit(code=1)


# ── Output helpers ───────────────────────────────────────────────────────


def _to_dict(obj: Any) -> dict[str, Any]:
    """Convert dataclass / dict to plain dict."""
    if hasattr(obj, "__dataclass_fields__"):
        return asdict(obj)
    if isinstance(obj, dict):
        return obj
    return {"value": obj}


def output_rows(rows: list[Any], *, as_json: bool = False, title: str = "") -> None:
    """Render rows as a Rich table, or as JSON."""
    if as_json:
        console.print_json(json.dumps([_to_dict(r) for r in rows], default=str))
        return
    if not rows:
        console.print("[dim]No rows.[/dim]")
        return
    _print_table(rows, title=title)


def _print_table(items: list, *, title: str = "") -> None:
    first = _to_dict(items[0])
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in first:
        table.add_column(str(col), overflow="fold")
    for item in items:
        table.add_row(*("" if v is None else str(v) for v in _to_dict(item).values()))
    console.print(table)
