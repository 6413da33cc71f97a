"""Collaborators built on the public ``Database`` API: CSV import and dataclass generation."""

from schemadb.tools.codegen import generate_dataclass
from schemadb.tools.csv_import import import_csv

__all__ = [
    "generate_dataclass",
    "import_csv",
]
