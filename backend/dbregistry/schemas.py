"""
Pydantic schemas for registry input, pool configuration, metadata and results.

ConnectionRequest, PoolConfig, DatabaseInfo, TableInfo, ColumnInfo,
ColumnDefinition, QueryResult, UpdateResult.
"""

from typing import Any

from pydantic import (
    SecretStr,
    ValidationError as PydanticValidationError,
    field_validator,
    model_validator,
)
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError
from sqlmodel import Field, SQLModel

from dbregistry.core.config import settings
from dbregistry.core.drivers import SERVER_DIALECTS, dialect_for_url_backend
from dbregistry.models import DialectEnum


def format_validation_error(exc: PydanticValidationError) -> str:
    """Flatten pydantic errors into ``field: message; ...``."""
    messages = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        msg = err.get("msg", "Invalid value")
        messages.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(messages)


# ---------------------------------------------------------------------------
# Connection input
# ---------------------------------------------------------------------------


class ConnectionRequest(SQLModel):
    """Validated arguments of create_connection."""

    name: str = Field(..., min_length=1, max_length=255)
    dialect: DialectEnum
    url: str = Field(..., min_length=1)
    user: str | None = Field(default=None, max_length=255)
    password: SecretStr = Field(default=SecretStr(""))

    @field_validator("name", "url", mode="before")
    @classmethod
    def strip_required(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            if not value:
                raise ValueError("must not be blank")
        return value

    @field_validator("user", mode="before")
    @classmethod
    def strip_user(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip() or None
        return value

    @field_validator("password", mode="before")
    @classmethod
    def none_password_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @model_validator(mode="after")
    def url_matches_dialect(self) -> "ConnectionRequest":
        try:
            parsed = make_url(self.url)
        except ArgumentError as e:
            raise ValueError(f"Malformed database URL: {e}") from e
        backend = dialect_for_url_backend(parsed.get_backend_name())
        if backend is not None and backend != self.dialect:
            raise ValueError(
                f"URL scheme '{parsed.get_backend_name()}' does not match "
                f"dialect '{self.dialect.value}'"
            )
        if self.dialect == DialectEnum.SQLITE and parsed.database in (None, "", ":memory:"):
            # Each pooled connection would open its own private in-memory database.
            raise ValueError("SQLite URL must name a database file, e.g. sqlite:///path/to/app.db")
        if self.dialect in SERVER_DIALECTS:
            if not parsed.host:
                raise ValueError(f"URL must include a host for {self.dialect.value}")
            if not (self.user or parsed.username):
                raise ValueError(f"user is required for {self.dialect.value}")
        return self

    def parsed_url(self) -> URL:
        """URL with the explicit user/password folded in."""
        url = make_url(self.url)
        if self.user:
            url = url.set(username=self.user)
        password = self.password.get_secret_value()
        if password:
            url = url.set(password=password)
        return url

    def masked_url(self) -> str:
        return self.parsed_url().render_as_string(hide_password=True)


# ---------------------------------------------------------------------------
# Pool configuration
# ---------------------------------------------------------------------------


class PoolConfig(SQLModel):
    """Bounds and timeouts for one ConnectionPool (seconds)."""

    max_size: int = Field(default=10, ge=1)
    min_idle: int = Field(default=2, ge=0)
    connection_timeout: float = Field(default=30.0, gt=0)
    idle_timeout: float = Field(default=600.0, gt=0)
    max_lifetime: float = Field(default=1800.0, gt=0)
    validation_timeout: float = Field(default=5.0, gt=0)

    @model_validator(mode="after")
    def min_idle_within_max(self) -> "PoolConfig":
        if self.min_idle > self.max_size:
            raise ValueError("min_idle cannot exceed max_size")
        return self

    @classmethod
    def from_settings(cls) -> "PoolConfig":
        return cls(
            max_size=settings.DB_POOL_MAX_SIZE,
            min_idle=settings.DB_POOL_MIN_IDLE,
            connection_timeout=settings.DB_POOL_CONNECTION_TIMEOUT,
            idle_timeout=settings.DB_POOL_IDLE_TIMEOUT,
            max_lifetime=settings.DB_POOL_MAX_LIFETIME,
            validation_timeout=settings.DB_VALIDATION_TIMEOUT,
        )


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------


class DatabaseInfo(SQLModel):
    """Read-only snapshot of the current connection's backend."""

    product_name: str
    product_version: str | None = None
    driver_name: str
    driver_version: str | None = None
    url: str
    username: str | None = None
    max_connections: int
    catalog_separator: str = "."
    supports_transactions: bool = True


class TableInfo(SQLModel):
    name: str
    schema_name: str | None = None
    type: str = "TABLE"
    remarks: str | None = None


class ColumnInfo(SQLModel):
    name: str
    type: str
    size: int | None = None
    decimal_digits: int | None = None
    nullable: bool = True
    default_value: str | None = None
    position: int
    remarks: str | None = None


class ColumnDefinition(SQLModel):
    """Column definition for create_table."""

    name: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)
    size: int = Field(default=0, ge=0)
    nullable: bool = True
    default_value: str | None = None
    primary_key: bool = False
    unique: bool = False


# ---------------------------------------------------------------------------
# Execution results
# ---------------------------------------------------------------------------


class QueryResult(SQLModel):
    """Columns in declared order and one mapping per row; SQL NULL is None."""

    statement: str
    columns: list[str]
    rows: list[dict[str, Any]]

    @property
    def row_count(self) -> int:
        return len(self.rows)


class UpdateResult(SQLModel):
    statement: str
    affected_rows: int
