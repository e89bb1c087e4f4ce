from collections.abc import Generator
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from dbregistry.core.pool import ConnectionPool
from dbregistry.core.registry import ConnectionRegistry
from dbregistry.schemas import PoolConfig


@pytest.fixture
def pool_config() -> PoolConfig:
    return PoolConfig(max_size=3, min_idle=1, connection_timeout=2.0)


@pytest.fixture
def sqlite_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'main.db'}"


@pytest.fixture
def registry(pool_config: PoolConfig) -> Generator[ConnectionRegistry, None, None]:
    reg = ConnectionRegistry(pool_config)
    yield reg
    reg.close_all()


@pytest.fixture
def sqlite_registry(
    registry: ConnectionRegistry, sqlite_url: str
) -> ConnectionRegistry:
    """Registry whose current connection ("default") is a real SQLite file."""
    registry.create_connection("default", "sqlite", sqlite_url)
    return registry


@pytest.fixture
def mock_pools() -> list[ConnectionPool]:
    """Pools built by mock_pool_factory, in creation order."""
    return []


@pytest.fixture
def mock_pool_factory(mock_pools: list[ConnectionPool]):
    """Pool factory whose connections are MagicMocks (validation always passes)."""

    def factory(name, dialect, url, config, *, connect_timeout=None) -> ConnectionPool:
        pool = ConnectionPool(
            name,
            dialect,
            url,
            config,
            connector=MagicMock(side_effect=lambda **_: MagicMock()),
        )
        mock_pools.append(pool)
        return pool

    return factory
