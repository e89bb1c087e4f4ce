"""
Dialect -> DB-API driver resolution.

The mapping is total over DialectEnum; anything else raises
UnsupportedDialectError before a connection is attempted.
"""

from dbregistry.core.exceptions import UnsupportedDialectError, ValidationError
from dbregistry.models import DIALECT_ALIASES, DialectEnum

DRIVERS: dict[DialectEnum, str] = {
    DialectEnum.POSTGRESQL: "psycopg",
    DialectEnum.MYSQL: "pymysql",
    DialectEnum.SQLITE: "sqlite3",
    DialectEnum.ORACLE: "oracledb",
    DialectEnum.SQLSERVER: "pymssql",
    DialectEnum.TRINO: "trino.dbapi",
}

# Installed on demand: pip install dbregistry[oracle] / dbregistry[sqlserver]
OPTIONAL_DRIVERS: frozenset[str] = frozenset({"oracledb", "pymssql"})

# Dialects that talk to a server (need host and user)
SERVER_DIALECTS: frozenset[DialectEnum] = frozenset(set(DialectEnum) - {DialectEnum.SQLITE})

_VALIDATION_QUERIES: dict[DialectEnum, str] = {
    DialectEnum.ORACLE: "SELECT 1 FROM DUAL",
}

_DEFAULT_PORTS: dict[DialectEnum, int] = {
    DialectEnum.POSTGRESQL: 5432,
    DialectEnum.MYSQL: 3306,
    DialectEnum.ORACLE: 1521,
    DialectEnum.SQLSERVER: 1433,
    DialectEnum.TRINO: 8080,
}


def supported_dialects() -> list[str]:
    return [d.value for d in DialectEnum]


def parse_dialect(dialect: str | DialectEnum) -> DialectEnum:
    """Case-insensitive dialect lookup (aliases included)."""
    if isinstance(dialect, DialectEnum):
        return dialect
    if not isinstance(dialect, str) or not dialect.strip():
        raise ValidationError("Database dialect cannot be empty")
    key = dialect.strip().lower()
    if key in DIALECT_ALIASES:
        return DIALECT_ALIASES[key]
    try:
        return DialectEnum(key)
    except ValueError:
        raise UnsupportedDialectError(dialect, supported_dialects()) from None


def resolve_driver(dialect: str | DialectEnum) -> str:
    """Return the DB-API module name used for *dialect*."""
    return DRIVERS[parse_dialect(dialect)]


def dialect_for_url_backend(backend: str) -> DialectEnum | None:
    """Map a URL scheme backend (``postgresql``, ``mssql``...) to a dialect, if known."""
    try:
        return parse_dialect(backend)
    except ValidationError:
        return None


def validation_query(dialect: DialectEnum) -> str:
    return _VALIDATION_QUERIES.get(dialect, "SELECT 1")


def default_port(dialect: DialectEnum) -> int | None:
    return _DEFAULT_PORTS.get(dialect)
