"""Unit tests for core.health.HealthMonitor: checks report, never raise."""

from unittest.mock import MagicMock

from dbregistry.core.exceptions import PoolTimeoutError
from dbregistry.core.health import HealthMonitor
from dbregistry.core.pool import ConnectionPool
from dbregistry.core.registry import ConnectionRegistry
from dbregistry.models import DialectEnum
from dbregistry.schemas import PoolConfig


def _handle(name: str = "pg") -> MagicMock:
    handle = MagicMock()
    handle.name = name
    handle.pool.closed = False
    return handle


def test_check_healthy_connection() -> None:
    handle = _handle()
    handle.pool.validate.return_value = True
    monitor = HealthMonitor(MagicMock(), timeout=0.5)

    assert monitor.check(handle) is True
    handle.pool.connection.assert_called_once_with(timeout=0.5, connect_timeout=0.5)
    handle.pool.validate.assert_called_once()


def test_check_pool_timeout_is_unhealthy() -> None:
    handle = _handle()
    handle.pool.connection.side_effect = PoolTimeoutError("pg", "Timed out after 0.5s")
    monitor = HealthMonitor(MagicMock(), timeout=0.5)

    assert monitor.check(handle) is False


def test_check_failed_validation_is_unhealthy() -> None:
    handle = _handle()
    handle.pool.validate.return_value = False
    assert HealthMonitor(MagicMock(), timeout=0.5).check(handle) is False


def test_check_closed_pool_skips_validation() -> None:
    handle = _handle()
    handle.pool.closed = True
    assert HealthMonitor(MagicMock()).check(handle) is False
    handle.pool.connection.assert_not_called()


def test_status_and_unhealthy() -> None:
    good, bad = _handle("good"), _handle("bad")
    good.pool.validate.return_value = True
    bad.pool.connection.side_effect = OSError("unreachable")
    registry = MagicMock()
    registry.handles.return_value = [good, bad]
    monitor = HealthMonitor(registry, timeout=0.5)

    assert monitor.status() == {"good": True, "bad": False}
    assert monitor.unhealthy() == ["bad"]


def test_status_on_real_sqlite(sqlite_registry: ConnectionRegistry) -> None:
    assert HealthMonitor(sqlite_registry).status() == {"default": True}


def test_check_opens_connection_with_health_timeout() -> None:
    connector = MagicMock(side_effect=lambda **_: MagicMock())
    pool = ConnectionPool(
        "pg",
        DialectEnum.POSTGRESQL,
        "postgresql://u@h/db",
        PoolConfig(max_size=1, min_idle=0),
        connect_timeout=10,
        connector=connector,
    )
    handle = MagicMock()
    handle.name = "pg"
    handle.pool = pool

    assert HealthMonitor(MagicMock(), timeout=0.5).check(handle) is True
    connector.assert_called_once_with(timeout=0.5)


def test_unhealthy_through_registry(sqlite_registry: ConnectionRegistry) -> None:
    assert sqlite_registry.unhealthy_connections() == []
    sqlite_registry.get_handle("default").pool.close()
    assert sqlite_registry.unhealthy_connections() == ["default"]
