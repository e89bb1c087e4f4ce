"""
DB-API connection helpers for every supported dialect.

psycopg (PostgreSQL), pymysql (MySQL), sqlite3 (SQLite) and trino (Trino) are
always installed; oracledb (Oracle) and pymssql (SQL Server) are optional
extras imported when a connection for that dialect is opened.
"""

import importlib
import logging
import math
import sqlite3
from typing import Any

import psycopg
import pymysql
from sqlalchemy.engine import URL, make_url
from trino.auth import BasicAuthentication
from trino.dbapi import connect as trino_connect

from dbregistry.core.config import settings
from dbregistry.core.drivers import DRIVERS, OPTIONAL_DRIVERS, default_port
from dbregistry.models import DialectEnum

_log = logging.getLogger(__name__)


def _import_driver(dialect: DialectEnum) -> Any:
    module_name = DRIVERS[dialect]
    try:
        return importlib.import_module(module_name)
    except ImportError as e:
        hint = ""
        if module_name in OPTIONAL_DRIVERS:
            hint = f"; install it with: pip install 'dbregistry[{dialect.value}]'"
        raise ImportError(f"Driver '{module_name}' is not installed{hint}") from e


def _trino_catalog_schema(database: str | None) -> tuple[str | None, str]:
    """trino://host/catalog/schema -> (catalog, schema)."""
    if not database:
        return None, "default"
    catalog, _, schema = database.partition("/")
    return catalog or None, schema or "default"


def connect(
    dialect: DialectEnum,
    url: URL | str,
    *,
    timeout: float | None = None,
) -> Any:
    """
    Open a DB-API connection for *dialect* at *url*.

    - url: SQLAlchemy-style URL (``postgresql://user:pw@host:5432/db``,
      ``sqlite:///path/to/file.db``). Username/password are taken from the URL.
    - timeout: connect timeout in seconds (default DB_CONNECT_TIMEOUT), rounded up to whole seconds.
    """
    url = make_url(url) if isinstance(url, str) else url
    timeout = max(1, math.ceil(timeout or settings.DB_CONNECT_TIMEOUT))
    host = url.host
    port = url.port or default_port(dialect)
    database = url.database
    username = url.username
    password = url.password if url.password is not None else ""

    if dialect == DialectEnum.POSTGRESQL:
        return psycopg.connect(
            host=host,
            port=int(port),
            dbname=database,
            user=username,
            password=password,
            connect_timeout=timeout,
        )
    if dialect == DialectEnum.MYSQL:
        return pymysql.connect(
            host=host,
            port=int(port),
            database=database,
            user=username,
            password=password,
            connect_timeout=timeout,
        )
    if dialect == DialectEnum.SQLITE:
        if not database or database == ":memory:":
            raise ValueError("SQLite requires a database file path")
        # Pooled connections move between threads.
        return sqlite3.connect(
            database,
            timeout=timeout,
            check_same_thread=False,
        )
    if dialect == DialectEnum.ORACLE:
        oracledb = _import_driver(dialect)
        return oracledb.connect(
            user=username,
            password=password,
            dsn=oracledb.makedsn(host, int(port), service_name=database),
            tcp_connect_timeout=timeout,
        )
    if dialect == DialectEnum.SQLSERVER:
        pymssql = _import_driver(dialect)
        return pymssql.connect(
            server=host,
            port=str(port),
            user=username,
            password=password,
            database=database or "",
            login_timeout=timeout,
        )
    if dialect == DialectEnum.TRINO:
        catalog, schema = _trino_catalog_schema(database)
        use_ssl = url.query.get("http_scheme") == "https" or bool(password)
        return trino_connect(
            host=host,
            port=int(port),
            user=username,
            auth=BasicAuthentication(username, password) if password else None,
            catalog=catalog,
            schema=schema,
            source="dbregistry",
            http_scheme="https" if use_ssl else "http",
            request_timeout=timeout,
        )
    raise ValueError(f"Unsupported dialect: {dialect}")


def _set_statement_timeout(conn: Any, dialect: DialectEnum, timeout_sec: float) -> None:
    timeout_ms = int(timeout_sec * 1000)
    if dialect == DialectEnum.ORACLE:
        conn.call_timeout = timeout_ms
        return
    cur = conn.cursor()
    try:
        if dialect == DialectEnum.POSTGRESQL:
            cur.execute("SET statement_timeout = %s", (str(timeout_ms),))
        elif dialect == DialectEnum.MYSQL:
            cur.execute("SET SESSION max_execution_time = %s", (timeout_ms,))
        elif dialect == DialectEnum.TRINO:
            cur.execute("SET SESSION query_max_execution_time = '%ss'" % timeout_sec)
    finally:
        try:
            cur.close()
        except Exception:
            pass


def _reset_statement_timeout(conn: Any, dialect: DialectEnum) -> None:
    try:
        if dialect == DialectEnum.ORACLE:
            conn.call_timeout = 0
            return
        cur = conn.cursor()
        if dialect == DialectEnum.POSTGRESQL:
            cur.execute("SET statement_timeout = 0")
        elif dialect == DialectEnum.MYSQL:
            cur.execute("SET SESSION max_execution_time = 0")
        elif dialect == DialectEnum.TRINO:
            cur.execute("SET SESSION query_max_execution_time = '0s'")
        cur.close()
    except Exception as e:
        _log.debug("Statement timeout reset failed: %s", e)


# SQLite and SQL Server have no per-session statement timeout we can set
_TIMEOUT_DIALECTS = frozenset(
    {DialectEnum.POSTGRESQL, DialectEnum.MYSQL, DialectEnum.TRINO, DialectEnum.ORACLE}
)


def execute(
    conn: Any,
    sql: str,
    params: dict | list | tuple | None = None,
    *,
    dialect: DialectEnum | None = None,
    timeout: float | None = None,
) -> Any:
    """
    Execute SQL and return the cursor. Caller uses cursor_to_dicts(cursor) or cursor.rowcount
    and closes the cursor.

    - dialect + timeout (default DB_STATEMENT_TIMEOUT): applies a per-statement
      timeout before the query and resets it after (Postgres statement_timeout,
      MySQL max_execution_time, Trino query_max_execution_time, Oracle call_timeout).
    """
    timeout_sec = timeout if timeout is not None else settings.DB_STATEMENT_TIMEOUT
    apply_timeout = (
        timeout_sec is not None and timeout_sec > 0 and dialect in _TIMEOUT_DIALECTS
    )

    if apply_timeout:
        _set_statement_timeout(conn, dialect, timeout_sec)

    cur = conn.cursor()
    try:
        if params is not None:
            cur.execute(sql, params)
        else:
            cur.execute(sql)
    except Exception:
        try:
            cur.close()
        except Exception:
            pass
        raise
    finally:
        if apply_timeout:
            _reset_statement_timeout(conn, dialect)

    return cur


def cursor_columns(cursor: Any) -> list[str]:
    """
    Column names of the current result set, in declared order.

    Repeated labels get a numeric suffix (a, a_2, a_3) so every column keeps
    its own key in row mappings.
    """
    desc = cursor.description
    if not desc:
        return []
    names: list[str] = []
    used: set[str] = set()
    for d in desc:
        base = label = str(d[0])
        n = 1
        while label in used:
            n += 1
            label = f"{base}_{n}"
        used.add(label)
        names.append(label)
    return names


def cursor_to_dicts(cursor: Any) -> list[dict[str, Any]]:
    """Convert cursor result to list of dicts. Works for every DB-API driver used here."""
    names = cursor_columns(cursor)
    if not names:
        return []
    return [dict(zip(names, row, strict=True)) for row in cursor.fetchall()]
