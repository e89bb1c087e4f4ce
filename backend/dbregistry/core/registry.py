"""
Registry of named, pooled database connections.

Holds a name -> ConnectionHandle mapping and the name of the "current"
connection. Schema and SQL operations check out connections from whichever
handle is current at the time they acquire.
"""

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from dbregistry.core.config import settings
from dbregistry.core.drivers import parse_dialect, resolve_driver
from dbregistry.core.exceptions import (
    DatabaseConnectionError,
    NotFoundError,
    ValidationError,
)
from dbregistry.core.health import HealthMonitor
from dbregistry.core.info import fetch_database_info
from dbregistry.core.pool import ConnectionPool
from dbregistry.models import ConnectionStateEnum, DialectEnum
from dbregistry.schemas import (
    ConnectionRequest,
    DatabaseInfo,
    PoolConfig,
    format_validation_error,
)

_log = logging.getLogger(__name__)

PoolFactory = Callable[..., ConnectionPool]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(eq=False)
class ConnectionHandle:
    """Registry entry binding a connection name to its pool and lifecycle state."""

    name: str
    dialect: DialectEnum
    driver: str
    url: str  # password masked
    user: str | None
    pool: ConnectionPool
    state: ConnectionStateEnum = ConnectionStateEnum.CREATED
    created_at: datetime = field(default_factory=_utc_now)

    @property
    def is_active(self) -> bool:
        return self.state == ConnectionStateEnum.ACTIVE and not self.pool.closed

    def close(self) -> None:
        self.pool.close()
        self.state = ConnectionStateEnum.CLOSED


class ConnectionRegistry:
    """Thread-safe owner of named connection handles and the current pointer."""

    def __init__(
        self,
        pool_config: PoolConfig | None = None,
        *,
        default_name: str | None = None,
        connect_timeout: float | None = None,
        health_timeout: float | None = None,
        pool_factory: PoolFactory | None = None,
    ) -> None:
        self._pool_config = pool_config or PoolConfig.from_settings()
        self._connect_timeout = connect_timeout
        self._pool_factory: PoolFactory = pool_factory or ConnectionPool
        self._handles: dict[str, ConnectionHandle] = {}
        self._current = default_name or settings.DEFAULT_CONNECTION_NAME
        self._lock = threading.Lock()
        self._health = HealthMonitor(self, timeout=health_timeout)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create_connection(
        self,
        name: str,
        dialect: str | DialectEnum,
        url: str,
        user: str | None = None,
        password: str | None = None,
    ) -> ConnectionHandle:
        """
        Build, validate and register a pooled connection.

        An existing handle with the same name is replaced (and closed) only once
        the new one validated; a failed create leaves it untouched.
        """
        dialect_enum = parse_dialect(dialect)
        request = self._build_request(name, dialect_enum, url, user, password)
        handle = self._open_handle(request)

        with self._lock:
            previous = self._handles.get(request.name)
            self._handles[request.name] = handle
            handle.state = ConnectionStateEnum.ACTIVE

        if previous is not None:
            _log.warning("Connection '%s' already existed; closing the previous pool", request.name)
            previous.close()
        _log.info(
            "Database connection '%s' created for %s database at %s",
            request.name,
            dialect_enum.value,
            handle.url,
        )
        return handle

    def switch_connection(self, name: str) -> None:
        """Repoint the current connection to *name*."""
        with self._lock:
            if name not in self._handles:
                available = ", ".join(sorted(self._handles)) or "none"
                raise NotFoundError(
                    f"Connection '{name}' not found. Available connections: {available}"
                )
            previous, self._current = self._current, name
        _log.info("Switched from connection '%s' to '%s'", previous, name)

    def close_connection(self, name: str) -> None:
        """Close and remove *name*; the current connection cannot be closed."""
        with self._lock:
            if name not in self._handles:
                return
            if name == self._current:
                raise DatabaseConnectionError(
                    name,
                    "Cannot close the current connection; switch to another connection first",
                )
            handle = self._handles.pop(name)
        handle.close()
        _log.info("Connection '%s' closed", name)

    def close_all(self) -> None:
        """Close every handle, current included (shutdown path)."""
        with self._lock:
            handles = list(self._handles.values())
            self._handles.clear()
        if handles:
            _log.info("Shutting down %d database connection(s)", len(handles))
        for handle in handles:
            handle.close()

    def initialize_default_connection(self) -> ConnectionHandle | None:
        """Create the configured default connection, if DEFAULT_CONNECTION_URL is set."""
        url = settings.DEFAULT_CONNECTION_URL
        if not url:
            return None
        _log.info("Initializing default database connection")
        dialect = settings.DEFAULT_CONNECTION_DIALECT
        if not dialect:
            try:
                dialect = make_url(url).get_backend_name()
            except ArgumentError as e:
                raise ValidationError(f"Malformed DEFAULT_CONNECTION_URL: {e}") from e
        return self.create_connection(
            settings.DEFAULT_CONNECTION_NAME,
            dialect,
            url,
            settings.DEFAULT_CONNECTION_USER,
            settings.DEFAULT_CONNECTION_PASSWORD,
        )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def current_connection_name(self) -> str:
        return self._current

    def connection_names(self) -> set[str]:
        with self._lock:
            return set(self._handles)

    def handles(self) -> list[ConnectionHandle]:
        """Snapshot of registered handles."""
        with self._lock:
            return list(self._handles.values())

    def get_handle(self, name: str) -> ConnectionHandle:
        with self._lock:
            handle = self._handles.get(name)
        if handle is None:
            raise NotFoundError(f"Connection '{name}' not found")
        return handle

    def get_current_handle(self) -> ConnectionHandle:
        with self._lock:
            name = self._current
            handle = self._handles.get(name)
        if handle is None:
            raise DatabaseConnectionError(name, f"Current connection '{name}' is not available")
        if not handle.is_active:
            raise DatabaseConnectionError(name, f"Current connection '{name}' is closed")
        return handle

    @contextmanager
    def acquire(self, timeout: float | None = None) -> Iterator[tuple[ConnectionHandle, Any]]:
        """Check out a connection from the current handle's pool for the block's duration."""
        handle = self.get_current_handle()
        with handle.pool.connection(timeout) as conn:
            yield handle, conn

    # ------------------------------------------------------------------
    # Health / info
    # ------------------------------------------------------------------

    def health_status(self) -> dict[str, bool]:
        return self._health.status()

    def unhealthy_connections(self) -> list[str]:
        return self._health.unhealthy()

    def database_info(self) -> DatabaseInfo:
        with self.acquire() as (handle, conn):
            try:
                return fetch_database_info(
                    conn,
                    dialect=handle.dialect,
                    driver=handle.driver,
                    url=handle.url,
                    user=handle.user,
                    max_connections=handle.pool.config.max_size,
                )
            except Exception as e:
                raise DatabaseConnectionError(
                    handle.name, f"Failed to retrieve database information: {e}"
                ) from e

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _build_request(
        name: str,
        dialect: DialectEnum,
        url: str,
        user: str | None,
        password: str | None,
    ) -> ConnectionRequest:
        try:
            return ConnectionRequest(
                name=name, dialect=dialect, url=url, user=user, password=password
            )
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid connection parameters: {format_validation_error(e)}") from e

    def _open_handle(self, request: ConnectionRequest) -> ConnectionHandle:
        driver = resolve_driver(request.dialect)
        try:
            pool = self._pool_factory(
                request.name,
                request.dialect,
                request.parsed_url(),
                self._pool_config,
                connect_timeout=self._connect_timeout,
            )
        except Exception as e:
            raise DatabaseConnectionError(
                request.name, f"Failed to build connection pool: {e}"
            ) from e

        handle = ConnectionHandle(
            name=request.name,
            dialect=request.dialect,
            driver=driver,
            url=request.masked_url(),
            user=request.user or request.parsed_url().username,
            pool=pool,
        )
        try:
            self._validate(handle)
        except DatabaseConnectionError:
            _log.error(
                "Failed to create connection '%s' for database type '%s'",
                request.name,
                request.dialect.value,
            )
            handle.close()
            raise
        handle.state = ConnectionStateEnum.VALIDATED
        pool.fill_min_idle()
        return handle

    def _validate(self, handle: ConnectionHandle) -> None:
        pool = handle.pool
        try:
            with pool.connection() as conn:
                ok = pool.validate(conn)
        except DatabaseConnectionError as e:
            cause = e.__cause__ or e
            raise DatabaseConnectionError(
                handle.name, f"Failed to create database connection: {cause}"
            ) from e
        if not ok:
            raise DatabaseConnectionError(handle.name, "Connection validation failed")
