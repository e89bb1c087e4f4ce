"""
Liveness check for a single DB-API connection.
"""

from typing import Any

from dbregistry.core.drivers import validation_query
from dbregistry.models import DialectEnum

from .connect import execute


def health_check(conn: Any, dialect: DialectEnum, timeout: float | None = None) -> bool:
    """
    Run the dialect's validation query (SELECT 1, or SELECT 1 FROM DUAL on Oracle)
    and return True if no exception.
    """
    cur = None
    try:
        cur = execute(conn, validation_query(dialect), dialect=dialect, timeout=timeout)
        cur.fetchone()
        return True
    except Exception:
        return False
    finally:
        if cur is not None:
            try:
                cur.close()
            except Exception:
                pass
