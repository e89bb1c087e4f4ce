"""
DB-API connections and bounded connection pools for registry handles.
"""

from .connect import connect, cursor_columns, cursor_to_dicts, execute
from .health import health_check
from .manager import ConnectionPool

__all__ = [
    "connect",
    "execute",
    "cursor_columns",
    "cursor_to_dicts",
    "health_check",
    "ConnectionPool",
]
