"""
On-demand liveness checks for registry connections.

Each check is a short-timeout acquire, the dialect's validation query, and a
release. A failing connection is reported as unhealthy; checks never raise.
"""

import logging
from typing import TYPE_CHECKING

from dbregistry.core.config import settings

if TYPE_CHECKING:
    from dbregistry.core.registry import ConnectionHandle, ConnectionRegistry

logger = logging.getLogger(__name__)


class HealthMonitor:
    """Check every handle of a ConnectionRegistry."""

    def __init__(self, registry: "ConnectionRegistry", *, timeout: float | None = None) -> None:
        self._registry = registry
        self._timeout = timeout if timeout is not None else settings.HEALTH_CHECK_TIMEOUT

    def check(self, handle: "ConnectionHandle") -> bool:
        """
        True if a connection can be checked out (or opened) and validated within
        the timeout.
        """
        pool = handle.pool
        if pool.closed:
            return False
        try:
            with pool.connection(timeout=self._timeout, connect_timeout=self._timeout) as conn:
                ok = pool.validate(conn, self._timeout)
        except Exception as e:
            logger.warning("Health check failed for connection '%s': %s", handle.name, e)
            return False
        if not ok:
            logger.warning("Health check failed for connection '%s': validation query failed", handle.name)
        return ok

    def status(self) -> dict[str, bool]:
        """Map every registered connection name to its liveness."""
        return {handle.name: self.check(handle) for handle in self._registry.handles()}

    def unhealthy(self) -> list[str]:
        """Names of connections that failed their check, sorted."""
        return sorted(name for name, ok in self.status().items() if not ok)
