"""
Execute ad-hoc SQL against the registry's current connection.

- Query path (statement starts with SELECT): returns QueryResult with every row.
- Update path (anything else): returns UpdateResult with the affected-row count,
  committed on success and rolled back on failure.

Uses core.pool (execute, cursor_columns) through ConnectionRegistry.acquire.
"""

import logging
import re
from typing import Any

from dbregistry.core.exceptions import SqlExecutionError, ValidationError
from dbregistry.core.pool import cursor_columns, execute
from dbregistry.core.registry import ConnectionRegistry
from dbregistry.schemas import QueryResult, UpdateResult

_log = logging.getLogger(__name__)

_QUERY_PREFIX = re.compile(r"select\b", re.IGNORECASE)
_LOG_SQL_MAX = 100


def _normalize(sql: Any) -> str:
    if not isinstance(sql, str) or not sql.strip():
        raise ValidationError("SQL cannot be empty")
    return sql.strip()


def _abbreviate(sql: str) -> str:
    return sql if len(sql) <= _LOG_SQL_MAX else sql[:_LOG_SQL_MAX] + "..."


def is_query(sql: str) -> bool:
    """True if the trimmed statement begins with SELECT (case-insensitive)."""
    return bool(_QUERY_PREFIX.match(sql.strip()))


def _close_cursor(cur: Any) -> None:
    try:
        cur.close()
    except Exception:
        pass


class SqlExecutor:
    """Runs one statement per call on a connection checked out from the current pool."""

    def __init__(self, registry: ConnectionRegistry) -> None:
        self._registry = registry

    def execute(self, sql: str) -> QueryResult | UpdateResult:
        """Dispatch to execute_query or execute_update by the statement's first keyword."""
        statement = _normalize(sql)
        if is_query(statement):
            return self.execute_query(statement)
        return self.execute_update(statement)

    def execute_query(self, sql: str) -> QueryResult:
        statement = _normalize(sql)
        with self._registry.acquire() as (handle, conn):
            cur = None
            try:
                cur = execute(conn, statement, dialect=handle.dialect)
                columns = cursor_columns(cur)
                rows = (
                    [dict(zip(columns, row, strict=True)) for row in cur.fetchall()]
                    if columns
                    else []
                )
            except Exception as e:
                _log.error(
                    "SQL query failed on '%s': %s | SQL: %s",
                    handle.name,
                    e,
                    _abbreviate(statement),
                )
                raise SqlExecutionError(statement, str(e)) from e
            finally:
                if cur is not None:
                    _close_cursor(cur)

        _log.info(
            "Query executed on '%s'. Rows returned: %d | SQL: %s",
            handle.name,
            len(rows),
            _abbreviate(statement),
        )
        return QueryResult(statement=statement, columns=columns, rows=rows)

    def execute_update(self, sql: str) -> UpdateResult:
        statement = _normalize(sql)
        with self._registry.acquire() as (handle, conn):
            cur = None
            try:
                cur = execute(conn, statement, dialect=handle.dialect)
                rowcount = cur.rowcount
                conn.commit()
            except Exception as e:
                try:
                    conn.rollback()
                except Exception:
                    pass
                _log.error(
                    "SQL execution failed on '%s': %s | SQL: %s",
                    handle.name,
                    e,
                    _abbreviate(statement),
                )
                raise SqlExecutionError(statement, str(e)) from e
            finally:
                if cur is not None:
                    _close_cursor(cur)

        # DDL reports -1 (or None) on most drivers
        affected = rowcount if rowcount is not None and rowcount >= 0 else 0
        _log.info(
            "SQL executed on '%s'. Rows affected: %d | SQL: %s",
            handle.name,
            affected,
            _abbreviate(statement),
        )
        return UpdateResult(statement=statement, affected_rows=affected)
