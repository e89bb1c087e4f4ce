"""
Ad-hoc SQL execution and CREATE TABLE helpers.
"""

from dbregistry.engines.sql.ddl import build_create_table_sql, create_table
from dbregistry.engines.sql.executor import SqlExecutor, is_query

__all__ = [
    "SqlExecutor",
    "is_query",
    "build_create_table_sql",
    "create_table",
]
