"""
Root Typer application for the schemadb CLI.

Commands open one database handle (``--database`` or ``SCHEMADB_URL``),
run a single operation through the public ``Database`` API and print
the result with Rich.
"""

from __future__ import annotations

from pathlib import Path

import typer
from typer import Typer

from schemadb.cli.utils import console, open_db, output_rows
from schemadb.core.logging import configure_logging

app = Typer(
    name="schemadb",
    help="schemadb — schema-aware queries for SQLite and MySQL.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

DatabaseOption = typer.Option(None, "--database", "-d", help="DSN or SQLite path (default: SCHEMADB_URL)")
JsonOption = typer.Option(False, "--json", help="JSON output")


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("schemadb")
        except PackageNotFoundError:
            from schemadb import __version__ as v
        typer.echo(f"schemadb {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str = typer.Option(
        "WARNING", "--log-level", envvar="SCHEMADB_LOG_LEVEL", help="DEBUG, INFO, WARNING or ERROR"
    ),
) -> None:
    """schemadb CLI — describe tables, generate row classes, import CSV, run queries."""
    configure_logging(level=log_level, json_format=False, add_timestamp=False)


# ── Commands ─────────────────────────────────────────────────────────────


@app.command()
def describe(
    table: str = typer.Argument(..., help="Table name"),
    database: str | None = DatabaseOption,
    json_out: bool = JsonOption,
) -> None:
    """Show a table's columns as the query layer sees them."""
    with open_db(database) as db:
        schema = db.describe(table)
        rows = [
            {
                "name": c.name,
                "type": c.logical_type.value,
                "original_type": c.original_type,
                "nullable": c.is_nullable,
                "primary": c.is_primary_key,
                "auto_increment": c.is_auto_increment,
                "default": c.default_value,
            }
            for c in schema.columns
        ]
    output_rows(rows, as_json=json_out, title=table)


@app.command()
def codegen(
    table: str = typer.Argument(..., help="Table name"),
    class_name: str | None = typer.Option(None, "--class-name", "-c", help="Class name (default: from table)"),
    comments: bool = typer.Option(True, "--comments/--no-comments", help="Annotate fields with column types"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write to file instead of stdout"),
    database: str | None = DatabaseOption,
) -> None:
    """Print a dataclass for the rows of TABLE."""
    from schemadb.tools.codegen import generate_dataclass

    with open_db(database) as db:
        code = generate_dataclass(db, table, class_name=class_name, type_comments=comments)
    if output is not None:
        output.write_text(code, encoding="utf-8")
        console.print(f"[green]✓[/green] Wrote {output}")
    else:
        typer.echo(code, nl=False)


def _parse_mapping(items: list[str]) -> dict[str, str | int]:
    transform: dict[str, str | int] = {}
    for item in items:
        column, sep, source = item.partition("=")
        if not sep or not column:
            raise typer.BadParameter(f"expected COLUMN=CSV_COLUMN, got {item!r}", param_hint="--map")
        transform[column] = int(source) if source.isdigit() else source
    return transform


@app.command("import-csv")
def import_csv_cmd(
    table: str = typer.Argument(..., help="Table name"),
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="CSV file"),
    mapping: list[str] = typer.Option([], "--map", "-m", help="COLUMN=CSV_COLUMN or COLUMN=INDEX (repeatable)"),
    headers: bool = typer.Option(True, "--headers/--no-headers", help="First line holds column names"),
    database: str | None = DatabaseOption,
    json_out: bool = JsonOption,
) -> None:
    """Insert every row of FILE into TABLE in one transaction."""
    from schemadb.tools.csv_import import import_csv

    transform = _parse_mapping(mapping)
    with open_db(database) as db:
        ids = import_csv(db, table, file, transform=transform, has_headers=headers)
    if json_out:
        console.print_json(data={"table": table, "rows": len(ids), "ids": ids})
    else:
        console.print(f"[green]✓[/green] Imported {len(ids)} rows into {table}")


@app.command()
def query(
    sql: str = typer.Argument(..., help="SQL with ? placeholders"),
    params: list[str] = typer.Argument(None, help="Positional parameters"),
    database: str | None = DatabaseOption,
    json_out: bool = JsonOption,
) -> None:
    """Run SQL; prints rows, or the affected row count."""
    with open_db(database) as db:
        statement = db.execute(sql, list(params or []))
        try:
            rows = statement.fetchall() if statement.columns else None
            count = statement.rowcount
        finally:
            statement.close_cursor()

    if rows is not None:
        output_rows(rows, as_json=json_out)
    elif json_out:
        console.print_json(data={"rowcount": count})
    else:
        console.print(f"[green]✓[/green] {count} row(s) affected")


if __name__ == "__main__":  # pragma: no cover
    app()
