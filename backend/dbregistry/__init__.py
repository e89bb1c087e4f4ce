"""
dbregistry: named pooled database connections, schema introspection and
ad-hoc SQL execution across PostgreSQL, MySQL, SQLite, Oracle, SQL Server
and Trino.
"""

from dbregistry.core.exceptions import (
    DatabaseConnectionError,
    DatabaseError,
    NotFoundError,
    PoolTimeoutError,
    SchemaInspectionError,
    SqlExecutionError,
    UnsupportedDialectError,
    ValidationError,
)
from dbregistry.core.health import HealthMonitor
from dbregistry.core.registry import ConnectionHandle, ConnectionRegistry
from dbregistry.engines.schema import SchemaInspector
from dbregistry.engines.sql import SqlExecutor
from dbregistry.manager import DatabaseManager
from dbregistry.models import ConnectionStateEnum, DialectEnum
from dbregistry.schemas import (
    ColumnDefinition,
    ColumnInfo,
    DatabaseInfo,
    PoolConfig,
    QueryResult,
    TableInfo,
    UpdateResult,
)

__all__ = [
    "DatabaseManager",
    "ConnectionRegistry",
    "ConnectionHandle",
    "SchemaInspector",
    "SqlExecutor",
    "HealthMonitor",
    "DialectEnum",
    "ConnectionStateEnum",
    "PoolConfig",
    "DatabaseInfo",
    "TableInfo",
    "ColumnInfo",
    "ColumnDefinition",
    "QueryResult",
    "UpdateResult",
    "DatabaseError",
    "ValidationError",
    "UnsupportedDialectError",
    "DatabaseConnectionError",
    "PoolTimeoutError",
    "NotFoundError",
    "SqlExecutionError",
    "SchemaInspectionError",
]
