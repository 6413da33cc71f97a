"""``python -m schemadb``."""

from schemadb.cli.app import app

app()
