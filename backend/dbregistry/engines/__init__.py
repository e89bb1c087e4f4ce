"""
Engines: schema introspection and SQL execution over the current connection.
"""

from dbregistry.engines.schema import SchemaInspector
from dbregistry.engines.sql import SqlExecutor, create_table

__all__ = [
    "SchemaInspector",
    "SqlExecutor",
    "create_table",
]
