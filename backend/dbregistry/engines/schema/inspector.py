"""
Read-only schema introspection against the registry's current connection.

Each call checks out one pooled connection for its duration only and runs
the dialect's catalog queries (see queries.py). No writes are performed.
"""

import logging
import re
from typing import Any

from dbregistry.core.exceptions import (
    NotFoundError,
    SchemaInspectionError,
    ValidationError,
)
from dbregistry.core.pool import cursor_to_dicts, execute
from dbregistry.core.registry import ConnectionRegistry
from dbregistry.models import DialectEnum
from dbregistry.schemas import ColumnInfo, TableInfo

from .queries import catalog_queries

logger = logging.getLogger(__name__)

_TYPE_SIZE_RE = re.compile(r"\(\s*(\d+)\s*(?:,\s*(\d+)\s*)?\)")

_TRUE_FLAGS = frozenset({"YES", "Y", "TRUE", "1"})


def _fetch(conn: Any, dialect: DialectEnum, sql: str, params: tuple | None = None) -> list[dict[str, Any]]:
    cur = execute(conn, sql, params, dialect=dialect)
    try:
        rows = cursor_to_dicts(cur)
    finally:
        cur.close()
    # Oracle reports unquoted aliases in upper case.
    return [{str(k).lower(): v for k, v in row.items()} for row in rows]


def _as_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    return int(value)


def _is_nullable(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().upper() in _TRUE_FLAGS


def _column_info(row: dict[str, Any]) -> ColumnInfo:
    type_name = str(row.get("type_name") or "")
    size = _as_int(row.get("column_size"))
    digits = _as_int(row.get("decimal_digits"))
    # SQLite declares size inline: VARCHAR(20), DECIMAL(10,2)
    if size is None:
        m = _TYPE_SIZE_RE.search(type_name)
        if m:
            size = int(m.group(1))
            if digits is None and m.group(2) is not None:
                digits = int(m.group(2))
    default = row.get("column_default")
    return ColumnInfo(
        name=str(row["column_name"]),
        type=type_name,
        size=size,
        decimal_digits=digits,
        nullable=_is_nullable(row.get("is_nullable")),
        default_value=str(default).strip() if default is not None else None,
        position=int(row["ordinal_position"]),
        remarks=row.get("remarks"),
    )


def _table_info(row: dict[str, Any]) -> TableInfo:
    return TableInfo(
        name=str(row["table_name"]),
        schema_name=row.get("table_schema"),
        type=str(row.get("table_type") or "TABLE"),
        remarks=row.get("remarks"),
    )


class SchemaInspector:
    """list_schemas, list_tables, describe_table, table_exists, table_count."""

    def __init__(self, registry: ConnectionRegistry) -> None:
        self._registry = registry

    def list_schemas(self) -> list[str]:
        """Schema names in driver order; an empty list is a valid answer."""
        with self._registry.acquire() as (handle, conn):
            queries = catalog_queries(handle.dialect)
            try:
                rows = _fetch(conn, handle.dialect, queries.schemas)
            except Exception as e:
                raise SchemaInspectionError("list schemas", None, str(e)) from e
        schemas = [str(r["schema_name"]) for r in rows if r.get("schema_name") is not None]
        logger.debug("Found %d schemas", len(schemas))
        return schemas

    def list_tables(self, schema: str | None = None) -> list[TableInfo]:
        """Base tables of *schema*, or of every non-system schema when None."""
        with self._registry.acquire() as (handle, conn):
            queries = catalog_queries(handle.dialect)
            try:
                if schema:
                    rows = _fetch(conn, handle.dialect, queries.tables_in_schema, (schema,))
                else:
                    rows = _fetch(conn, handle.dialect, queries.tables)
            except Exception as e:
                raise SchemaInspectionError("list tables for schema", schema, str(e)) from e
        tables = [_table_info(r) for r in rows]
        logger.debug("Found %d tables in schema '%s'", len(tables), schema)
        return tables

    def describe_table(self, table: str, schema: str | None = None) -> list[ColumnInfo]:
        """
        Columns of *table* ordered by ordinal position.

        schema=None means the session's current schema. Raises NotFoundError
        when the table has no columns (does not exist).
        """
        if not isinstance(table, str) or not table.strip():
            raise ValidationError("Table name cannot be empty")
        table = table.strip()
        target = f"{schema}.{table}" if schema else table

        with self._registry.acquire() as (handle, conn):
            queries = catalog_queries(handle.dialect)
            try:
                effective_schema = schema
                if not effective_schema:
                    current = _fetch(conn, handle.dialect, queries.current_schema)
                    effective_schema = next(iter(current[0].values())) if current else None
                if queries.schema_exists and not _fetch(
                    conn, handle.dialect, queries.schema_exists, (effective_schema,)
                ):
                    rows = []
                else:
                    rows = _fetch(conn, handle.dialect, queries.columns, (effective_schema, table))
            except Exception as e:
                raise SchemaInspectionError("describe table", target, str(e)) from e

        if not rows:
            raise NotFoundError(f"Table '{table}' not found in schema '{effective_schema}'")
        columns = sorted((_column_info(r) for r in rows), key=lambda c: c.position)
        logger.debug("Found %d columns in table '%s.%s'", len(columns), effective_schema, table)
        return columns

    def table_exists(self, table: str, schema: str | None = None) -> bool:
        try:
            self.describe_table(table, schema)
            return True
        except NotFoundError:
            return False

    def table_count(self, schema: str | None = None) -> int:
        return len(self.list_tables(schema))
