"""
Enums describing dialects and connection lifecycle.
"""

from enum import Enum


class DialectEnum(str, Enum):
    """Supported database dialects."""

    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    SQLITE = "sqlite"
    ORACLE = "oracle"
    SQLSERVER = "sqlserver"
    TRINO = "trino"


# Alternate spellings accepted by parse_dialect
DIALECT_ALIASES: dict[str, DialectEnum] = {
    "postgres": DialectEnum.POSTGRESQL,
    "pg": DialectEnum.POSTGRESQL,
    "mariadb": DialectEnum.MYSQL,
    "mssql": DialectEnum.SQLSERVER,
}


class ConnectionStateEnum(str, Enum):
    """Lifecycle of a registry handle: CREATED -> VALIDATED -> ACTIVE -> CLOSED."""

    CREATED = "created"
    VALIDATED = "validated"
    ACTIVE = "active"
    CLOSED = "closed"
