"""End-to-end tests for DatabaseManager over real SQLite files."""

from pathlib import Path
from unittest.mock import patch

import pytest

from dbregistry import (
    ColumnDefinition,
    DatabaseConnectionError,
    DatabaseManager,
    NotFoundError,
    PoolConfig,
    QueryResult,
    UnsupportedDialectError,
)


@pytest.fixture
def manager(tmp_path: Path):
    with DatabaseManager(pool_config=PoolConfig(max_size=2, min_idle=0)) as mgr:
        mgr.create_connection("default", "sqlite", f"sqlite:///{tmp_path / 'a.db'}")
        mgr.create_connection("archive", "sqlite", f"sqlite:///{tmp_path / 'b.db'}")
        yield mgr


def test_connections_and_switching(manager: DatabaseManager) -> None:
    assert manager.connection_names() == {"default", "archive"}
    assert manager.current_connection_name() == "default"

    manager.switch_connection("archive")
    assert manager.current_connection_name() == "archive"

    with pytest.raises(NotFoundError):
        manager.switch_connection("nope")
    assert manager.current_connection_name() == "archive"


def test_create_table_then_inspect(manager: DatabaseManager) -> None:
    manager.create_table(
        "events",
        [
            ColumnDefinition(name="id", type="INTEGER", primary_key=True),
            ColumnDefinition(name="kind", type="VARCHAR", size=30, nullable=False),
        ],
    )

    assert manager.table_exists("events")
    assert manager.table_count() == 1
    assert [t.name for t in manager.list_tables()] == ["events"]
    kind = manager.describe_table("events")[1]
    assert (kind.name, kind.size, kind.nullable) == ("kind", 30, False)

    # Tables are per connection
    manager.switch_connection("archive")
    assert manager.table_exists("events") is False
    assert "main" in manager.list_schemas()


def test_execute_round_trip(manager: DatabaseManager) -> None:
    manager.execute("CREATE TABLE kv (k TEXT, v TEXT)")
    assert manager.execute("INSERT INTO kv VALUES ('a', NULL)").affected_rows == 1

    result = manager.execute("select k, v from kv")
    assert isinstance(result, QueryResult)
    assert result.rows == [{"k": "a", "v": None}]


def test_close_rules(manager: DatabaseManager) -> None:
    with pytest.raises(DatabaseConnectionError):
        manager.close_connection("default")

    manager.close_connection("archive")
    assert manager.connection_names() == {"default"}
    assert manager.health_status() == {"default": True}


def test_database_info(manager: DatabaseManager) -> None:
    info = manager.database_info()
    assert info.product_name == "SQLite"
    assert info.max_connections == 2


def test_unsupported_dialect(manager: DatabaseManager) -> None:
    with pytest.raises(UnsupportedDialectError):
        manager.create_connection("h2", "h2", "h2:mem:test")
    assert "h2" not in manager.connection_names()


def test_context_exit_closes_everything(tmp_path: Path) -> None:
    with DatabaseManager(pool_config=PoolConfig(max_size=1, min_idle=0)) as mgr:
        handle = mgr.create_connection("default", "sqlite", f"sqlite:///{tmp_path / 'c.db'}")
    assert handle.pool.closed
    assert mgr.connection_names() == set()


def test_initialize_default_from_settings(tmp_path: Path) -> None:
    with patch("dbregistry.core.registry.settings") as mock_settings:
        mock_settings.DEFAULT_CONNECTION_URL = f"sqlite:///{tmp_path / 'd.db'}"
        mock_settings.DEFAULT_CONNECTION_DIALECT = "sqlite"
        mock_settings.DEFAULT_CONNECTION_NAME = "default"
        mock_settings.DEFAULT_CONNECTION_USER = None
        mock_settings.DEFAULT_CONNECTION_PASSWORD = ""
        mgr = DatabaseManager(
            pool_config=PoolConfig(max_size=1, min_idle=0), initialize_default=True
        )
    try:
        assert mgr.connection_names() == {"default"}
        assert mgr.execute("SELECT 1 AS one").rows == [{"one": 1}]
    finally:
        mgr.close_all()


def test_get_connection_and_unhealthy(manager: DatabaseManager) -> None:
    archive = manager.get_connection("archive")
    assert archive.name == "archive"
    with pytest.raises(NotFoundError):
        manager.get_connection("nope")

    assert manager.unhealthy_connections() == []
    archive.pool.close()
    assert manager.unhealthy_connections() == ["archive"]
