"""Unit tests for core.drivers (dialect parsing and driver resolution)."""

import pytest

from dbregistry.core.drivers import (
    DRIVERS,
    default_port,
    dialect_for_url_backend,
    parse_dialect,
    resolve_driver,
    supported_dialects,
    validation_query,
)
from dbregistry.core.exceptions import UnsupportedDialectError, ValidationError
from dbregistry.models import DialectEnum


def test_every_dialect_has_a_driver() -> None:
    assert set(DRIVERS) == set(DialectEnum)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("postgresql", DialectEnum.POSTGRESQL),
        ("PostgreSQL", DialectEnum.POSTGRESQL),
        ("  mysql ", DialectEnum.MYSQL),
        ("postgres", DialectEnum.POSTGRESQL),
        ("mssql", DialectEnum.SQLSERVER),
        ("mariadb", DialectEnum.MYSQL),
        (DialectEnum.TRINO, DialectEnum.TRINO),
    ],
)
def test_parse_dialect_accepts_case_and_aliases(raw: str, expected: DialectEnum) -> None:
    assert parse_dialect(raw) == expected


def test_resolve_driver() -> None:
    assert resolve_driver("postgresql") == "psycopg"
    assert resolve_driver("MySQL") == "pymysql"
    assert resolve_driver(DialectEnum.SQLITE) == "sqlite3"
    assert resolve_driver("oracle") == "oracledb"
    assert resolve_driver("sqlserver") == "pymssql"
    assert resolve_driver("trino") == "trino.dbapi"


def test_unsupported_dialect_lists_supported() -> None:
    with pytest.raises(UnsupportedDialectError) as exc_info:
        resolve_driver("mongodb")
    err = exc_info.value
    assert err.dialect == "mongodb"
    assert "postgresql" in str(err)
    assert tuple(supported_dialects()) == err.supported
    # Unsupported dialect is a validation error too
    assert isinstance(err, ValidationError)


@pytest.mark.parametrize("raw", ["", "   ", None])
def test_blank_dialect_is_validation_error(raw: str | None) -> None:
    with pytest.raises(ValidationError, match="cannot be empty"):
        parse_dialect(raw)  # type: ignore[arg-type]


def test_dialect_for_url_backend() -> None:
    assert dialect_for_url_backend("postgresql") == DialectEnum.POSTGRESQL
    assert dialect_for_url_backend("mssql") == DialectEnum.SQLSERVER
    assert dialect_for_url_backend("h2") is None


def test_validation_query_and_ports() -> None:
    assert validation_query(DialectEnum.ORACLE) == "SELECT 1 FROM DUAL"
    assert validation_query(DialectEnum.POSTGRESQL) == "SELECT 1"
    assert default_port(DialectEnum.MYSQL) == 3306
    assert default_port(DialectEnum.SQLITE) is None
