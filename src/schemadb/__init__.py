"""
schemadb - schema-aware query execution for SQLite and MySQL.

Re-exports the public API of ``schemadb.core``.
"""

__version__ = "0.1.0"

from schemadb.core import *  # noqa
from schemadb.core import __all__  # noqa
