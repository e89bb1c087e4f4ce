"""
DatabaseManager: the single entry point upstream callers (CLI, assistant) use.

Owns one ConnectionRegistry and the SchemaInspector / SqlExecutor bound to it.
"""

from collections.abc import Sequence
from types import TracebackType

from dbregistry.core.registry import ConnectionHandle, ConnectionRegistry
from dbregistry.engines.schema import SchemaInspector
from dbregistry.engines.sql import SqlExecutor, create_table
from dbregistry.models import DialectEnum
from dbregistry.schemas import (
    ColumnDefinition,
    ColumnInfo,
    DatabaseInfo,
    PoolConfig,
    QueryResult,
    TableInfo,
    UpdateResult,
)


class DatabaseManager:
    """
    create/switch/close connections, inspect schemas and run SQL.

    Use as a context manager (or call close_all) to release every pool.
    """

    def __init__(
        self,
        registry: ConnectionRegistry | None = None,
        *,
        pool_config: PoolConfig | None = None,
        initialize_default: bool = False,
    ) -> None:
        self.registry = registry or ConnectionRegistry(pool_config)
        self.inspector = SchemaInspector(self.registry)
        self.executor = SqlExecutor(self.registry)
        if initialize_default:
            self.registry.initialize_default_connection()

    def __enter__(self) -> "DatabaseManager":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close_all()

    # --- connections ---

    def create_connection(
        self,
        name: str,
        dialect: str | DialectEnum,
        url: str,
        user: str | None = None,
        password: str | None = None,
    ) -> ConnectionHandle:
        return self.registry.create_connection(name, dialect, url, user, password)

    def switch_connection(self, name: str) -> None:
        self.registry.switch_connection(name)

    def close_connection(self, name: str) -> None:
        self.registry.close_connection(name)

    def current_connection_name(self) -> str:
        return self.registry.current_connection_name()

    def connection_names(self) -> set[str]:
        return self.registry.connection_names()

    def health_status(self) -> dict[str, bool]:
        return self.registry.health_status()

    def unhealthy_connections(self) -> list[str]:
        """Sorted names of connections whose health check failed."""
        return self.registry.unhealthy_connections()

    def get_connection(self, name: str) -> ConnectionHandle:
        """Registered handle for *name*; NotFoundError if absent."""
        return self.registry.get_handle(name)

    def database_info(self) -> DatabaseInfo:
        return self.registry.database_info()

    def close_all(self) -> None:
        self.registry.close_all()

    # --- schema ---

    def list_schemas(self) -> list[str]:
        return self.inspector.list_schemas()

    def list_tables(self, schema: str | None = None) -> list[TableInfo]:
        return self.inspector.list_tables(schema)

    def describe_table(self, table: str, schema: str | None = None) -> list[ColumnInfo]:
        return self.inspector.describe_table(table, schema)

    def table_exists(self, table: str, schema: str | None = None) -> bool:
        return self.inspector.table_exists(table, schema)

    def table_count(self, schema: str | None = None) -> int:
        return self.inspector.table_count(schema)

    # --- SQL ---

    def execute(self, sql: str) -> QueryResult | UpdateResult:
        return self.executor.execute(sql)

    def create_table(
        self,
        table: str,
        columns: Sequence[ColumnDefinition],
        schema: str | None = None,
    ) -> UpdateResult:
        return create_table(self.executor, table, columns, schema)
