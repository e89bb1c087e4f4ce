"""
Error taxonomy shared by the registry, schema inspector and SQL executor.

Every error derives from DatabaseError so callers can catch the whole family.
"""


class DatabaseError(Exception):
    """Base class for all dbregistry errors."""

    pass


class ValidationError(DatabaseError, ValueError):
    """Malformed or empty input, raised before any I/O happens."""

    pass


class UnsupportedDialectError(ValidationError):
    """Dialect string does not map to a known driver."""

    def __init__(self, dialect: str, supported: list[str] | tuple[str, ...]) -> None:
        self.dialect = dialect
        self.supported = tuple(supported)
        super().__init__(
            f"Unsupported database dialect: {dialect!r}. "
            f"Supported dialects: {', '.join(self.supported)}"
        )


class DatabaseConnectionError(DatabaseError):
    """Pool build/validation failure, or the named connection is unusable."""

    def __init__(self, name: str | None, message: str) -> None:
        self.name = name
        super().__init__(f"[{name}] {message}" if name else message)


class PoolTimeoutError(DatabaseConnectionError):
    """No pooled connection became available within the connection timeout."""

    pass


class NotFoundError(DatabaseError, LookupError):
    """Requested connection or schema object does not exist."""

    pass


class SqlExecutionError(DatabaseError):
    """The backend rejected a statement."""

    def __init__(self, statement: str, message: str) -> None:
        self.statement = statement
        self.backend_message = message
        super().__init__(f"SQL execution failed: {message}")


class SchemaInspectionError(DatabaseError):
    """The backend failed while reading catalog metadata."""

    def __init__(self, operation: str, target: str | None, message: str) -> None:
        self.operation = operation
        self.target = target
        detail = f"{operation} '{target}'" if target else operation
        super().__init__(f"Failed to {detail}: {message}")
