"""
DatabaseInfo snapshot for a live connection.
"""

import importlib
from typing import Any

from dbregistry.models import DialectEnum
from dbregistry.schemas import DatabaseInfo

from .pool import execute

PRODUCT_NAMES: dict[DialectEnum, str] = {
    DialectEnum.POSTGRESQL: "PostgreSQL",
    DialectEnum.MYSQL: "MySQL",
    DialectEnum.SQLITE: "SQLite",
    DialectEnum.ORACLE: "Oracle",
    DialectEnum.SQLSERVER: "Microsoft SQL Server",
    DialectEnum.TRINO: "Trino",
}

# (server version, authenticated user)
_IDENTITY_QUERIES: dict[DialectEnum, str] = {
    DialectEnum.POSTGRESQL: "SELECT version(), current_user",
    DialectEnum.MYSQL: "SELECT VERSION(), CURRENT_USER()",
    DialectEnum.SQLITE: "SELECT sqlite_version(), NULL",
    DialectEnum.ORACLE: "SELECT version, USER FROM product_component_version WHERE ROWNUM = 1",
    DialectEnum.SQLSERVER: "SELECT @@VERSION, SUSER_SNAME()",
    DialectEnum.TRINO: "SELECT version(), current_user",
}


def driver_version(driver: str) -> str | None:
    module = importlib.import_module(driver.split(".", 1)[0])
    version = getattr(module, "__version__", None) or getattr(module, "sqlite_version", None)
    return str(version) if version is not None else None


def fetch_database_info(
    conn: Any,
    *,
    dialect: DialectEnum,
    driver: str,
    url: str,
    user: str | None,
    max_connections: int,
) -> DatabaseInfo:
    """Query server version and user over *conn*. Driver errors propagate."""
    cur = execute(conn, _IDENTITY_QUERIES[dialect], dialect=dialect)
    try:
        row = cur.fetchone()
    finally:
        cur.close()
    version, current_user = (row[0], row[1]) if row else (None, None)
    return DatabaseInfo(
        product_name=PRODUCT_NAMES[dialect],
        product_version=str(version) if version is not None else None,
        driver_name=driver,
        driver_version=driver_version(driver),
        url=url,
        username=str(current_user) if current_user is not None else user,
        max_connections=max_connections,
        catalog_separator=".",
        supports_transactions=dialect != DialectEnum.TRINO,
    )
