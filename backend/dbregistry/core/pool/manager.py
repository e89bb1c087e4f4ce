"""
Bounded connection pool for one named connection.

Checkouts are limited to ``max_size`` by a semaphore; callers waiting longer
than ``connection_timeout`` get PoolTimeoutError. Idle connections are
evicted by max lifetime and idle timeout, pinged before reuse when they sat
unused for a while, and closed instead of pooled once the pool is closed.
"""

import logging
import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from functools import partial
from typing import Any, NamedTuple

from sqlalchemy.engine import URL

from dbregistry.core.exceptions import DatabaseConnectionError, PoolTimeoutError
from dbregistry.models import DialectEnum
from dbregistry.schemas import PoolConfig

from .connect import connect
from .health import health_check

_log = logging.getLogger(__name__)


_PING_IDLE_THRESHOLD = 30.0  # only ping connections idle longer than this (seconds)


class _PoolEntry(NamedTuple):
    conn: Any
    created_at: float  # time.monotonic() when the connection was opened
    last_used: float   # time.monotonic() when last returned to pool


class ConnectionPool:
    """acquire / release / validate / close over DB-API connections to one backend."""

    def __init__(
        self,
        name: str,
        dialect: DialectEnum,
        url: URL | str,
        config: PoolConfig | None = None,
        *,
        connect_timeout: float | None = None,
        connector: Callable[..., Any] | None = None,
    ) -> None:
        self.name = name
        self.dialect = dialect
        self.config = config or PoolConfig.from_settings()
        # Called as connector(timeout=seconds or None)
        self._connector = connector or partial(connect, dialect, url)
        self._connect_timeout = connect_timeout
        self._idle: list[_PoolEntry] = []
        self._checked_out: dict[int, float] = {}  # id(conn) -> created_at
        self._lock = threading.Lock()
        self._slots = threading.BoundedSemaphore(self.config.max_size)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def acquire(self, timeout: float | None = None, *, connect_timeout: float | None = None) -> Any:
        """
        Check out a connection, waiting up to *timeout* (default: connection_timeout)
        for a free slot. A new connection opened for this checkout uses
        *connect_timeout* (default: the pool's connect timeout).
        """
        if self._closed:
            raise DatabaseConnectionError(self.name, "Connection pool is closed")
        wait = self.config.connection_timeout if timeout is None else timeout
        if not self._slots.acquire(timeout=wait):
            raise PoolTimeoutError(
                self.name,
                f"Timed out after {wait:g}s waiting for a connection "
                f"({self.config.max_size} in use)",
            )
        try:
            conn, created_at = self._checkout(connect_timeout)
        except Exception:
            self._slots.release()
            raise

        with self._lock:
            if not self._closed:
                self._checked_out[id(conn)] = created_at
                return conn
        self._close_quiet(conn)
        self._slots.release()
        raise DatabaseConnectionError(self.name, "Connection pool is closed")

    def release(self, conn: Any) -> None:
        """Return a connection to the pool (or close it if the pool is closed/full/expired)."""
        with self._lock:
            created_at = self._checked_out.pop(id(conn), None)
        if created_at is None:
            _log.warning("Pool '%s': release of a connection it does not own", self.name)
            self._close_quiet(conn)
            return

        try:
            if self._closed or self._is_expired(created_at) or not self._reset(conn):
                self._close_quiet(conn)
                return
            with self._lock:
                if not self._closed and len(self._idle) < self.config.max_size:
                    self._idle.append(
                        _PoolEntry(conn=conn, created_at=created_at, last_used=time.monotonic())
                    )
                    return
            self._close_quiet(conn)
        finally:
            self._slots.release()

    @contextmanager
    def connection(
        self, timeout: float | None = None, *, connect_timeout: float | None = None
    ) -> Iterator[Any]:
        """Scoped checkout: the connection is released on every exit path."""
        conn = self.acquire(timeout, connect_timeout=connect_timeout)
        try:
            yield conn
        finally:
            self.release(conn)

    def validate(self, conn: Any, timeout: float | None = None) -> bool:
        return health_check(
            conn,
            self.dialect,
            timeout if timeout is not None else self.config.validation_timeout,
        )

    def fill_min_idle(self) -> int:
        """Open connections until idle + in-use reaches min_idle. Returns how many were opened."""
        opened = 0
        while True:
            with self._lock:
                if self._closed or self._size() >= self.config.min_idle:
                    break
            try:
                conn = self._open()
            except DatabaseConnectionError as e:
                _log.warning("Pool '%s': could not pre-fill idle connections: %s", self.name, e)
                break
            now = time.monotonic()
            with self._lock:
                if not self._closed and self._size() < self.config.min_idle:
                    self._idle.append(_PoolEntry(conn=conn, created_at=now, last_used=now))
                    opened += 1
                    continue
            self._close_quiet(conn)
            break
        return opened

    def close(self) -> None:
        """Close idle connections; checked-out ones are closed when released."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            entries, self._idle = self._idle, []
            in_use = len(self._checked_out)
        for e in entries:
            self._close_quiet(e.conn)
        _log.info(
            "Pool '%s' closed (%d idle closed, %d in use close on release)",
            self.name,
            len(entries),
            in_use,
        )

    def stats(self) -> dict[str, int | bool]:
        """Return pool statistics for monitoring."""
        with self._lock:
            return {
                "idle": len(self._idle),
                "in_use": len(self._checked_out),
                "max_size": self.config.max_size,
                "closed": self._closed,
            }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _size(self) -> int:
        return len(self._idle) + len(self._checked_out)

    def _checkout(self, connect_timeout: float | None = None) -> tuple[Any, float]:
        self._evict_idle()
        while True:
            entry = self._pop()
            if entry is None:
                break
            if self._is_expired(entry.created_at):
                self._close_quiet(entry.conn)
                continue
            idle_sec = time.monotonic() - entry.last_used
            if idle_sec > _PING_IDLE_THRESHOLD and not self.validate(entry.conn):
                self._close_quiet(entry.conn)
                continue
            return entry.conn, entry.created_at

        return self._open(connect_timeout), time.monotonic()

    def _open(self, connect_timeout: float | None = None) -> Any:
        try:
            return self._connector(timeout=connect_timeout or self._connect_timeout)
        except Exception as e:
            raise DatabaseConnectionError(self.name, f"Failed to open connection: {e}") from e

    def _pop(self) -> _PoolEntry | None:
        with self._lock:
            if self._idle:
                return self._idle.pop()
        return None

    def _evict_idle(self) -> None:
        """Retire connections idle longer than idle_timeout while more than min_idle remain."""
        now = time.monotonic()
        evicted: list[_PoolEntry] = []
        with self._lock:
            keep: list[_PoolEntry] = []
            # Oldest first so the most recently used survive.
            for entry in self._idle:
                stale = (now - entry.last_used) > self.config.idle_timeout
                if stale and len(self._idle) - len(evicted) > self.config.min_idle:
                    evicted.append(entry)
                else:
                    keep.append(entry)
            self._idle = keep
        for e in evicted:
            self._close_quiet(e.conn)
        if evicted:
            _log.debug("Pool '%s': evicted %d idle connection(s)", self.name, len(evicted))

    def _is_expired(self, created_at: float) -> bool:
        return (time.monotonic() - created_at) > self.config.max_lifetime

    def _reset(self, conn: Any) -> bool:
        """Roll back leftover transaction state; False if the connection is unusable."""
        if self.dialect == DialectEnum.TRINO:
            # Trino connections run in autocommit; rollback() raises outside a transaction.
            return True
        try:
            conn.rollback()
            return True
        except Exception:
            return False

    @staticmethod
    def _close_quiet(conn: Any) -> None:
        try:
            conn.close()
        except Exception:
            pass
