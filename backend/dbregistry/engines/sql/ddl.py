"""
CREATE TABLE from ColumnDefinition lists.
"""

import logging
import re
from collections.abc import Sequence

from dbregistry.core.exceptions import ValidationError
from dbregistry.schemas import ColumnDefinition, UpdateResult

from .executor import SqlExecutor

_log = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_$]*$")


def _check_identifier(kind: str, value: str | None) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{kind} name cannot be empty")
    value = value.strip()
    if not _IDENTIFIER.match(value):
        raise ValidationError(f"Invalid {kind.lower()} name: {value!r}")
    return value


def validate_column_definitions(columns: Sequence[ColumnDefinition]) -> None:
    """At least one column; names valid and unique (case-insensitive); types non-blank."""
    if not columns:
        raise ValidationError("At least one column must be specified")
    seen: set[str] = set()
    for column in columns:
        name = _check_identifier("Column", column.name)
        if not column.type or not column.type.strip():
            raise ValidationError(f"Column type cannot be empty for column '{name}'")
        if name.lower() in seen:
            raise ValidationError(f"Duplicate column name: {name}")
        seen.add(name.lower())


def build_create_table_sql(
    table: str,
    columns: Sequence[ColumnDefinition],
    schema: str | None = None,
) -> str:
    table = _check_identifier("Table", table)
    validate_column_definitions(columns)
    qualified = f"{_check_identifier('Schema', schema)}.{table}" if schema else table

    primary_keys = [c.name.strip() for c in columns if c.primary_key]
    parts: list[str] = []
    for col in columns:
        sql = f"{col.name.strip()} {col.type.strip()}"
        if col.size > 0:
            sql += f"({col.size})"
        if not col.nullable:
            sql += " NOT NULL"
        if col.default_value is not None:
            sql += f" DEFAULT {col.default_value}"
        if col.primary_key and len(primary_keys) == 1:
            sql += " PRIMARY KEY"
        elif col.unique:
            sql += " UNIQUE"
        parts.append(sql)
    if len(primary_keys) > 1:
        parts.append(f"PRIMARY KEY ({', '.join(primary_keys)})")

    return f"CREATE TABLE {qualified} ({', '.join(parts)})"


def create_table(
    executor: SqlExecutor,
    table: str,
    columns: Sequence[ColumnDefinition],
    schema: str | None = None,
) -> UpdateResult:
    """Validate, build and run CREATE TABLE through the executor's update path."""
    sql = build_create_table_sql(table, columns, schema)
    result = executor.execute_update(sql)
    _log.info("Table '%s' created with %d columns", f"{schema}.{table}" if schema else table, len(columns))
    return result
