"""
Settings for the connection registry, pools and health checks.

Values come from the environment (or a ``.env`` file); the module-level
``settings`` instance supplies defaults to every component.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Pool sizing and timeouts (seconds)
    DB_POOL_MAX_SIZE: int = Field(default=10, ge=1)
    DB_POOL_MIN_IDLE: int = Field(default=2, ge=0)
    DB_POOL_CONNECTION_TIMEOUT: float = Field(default=30.0, gt=0)
    DB_POOL_IDLE_TIMEOUT: float = Field(default=600.0, gt=0)
    DB_POOL_MAX_LIFETIME: float = Field(default=1800.0, gt=0)

    # Driver-level timeouts
    DB_CONNECT_TIMEOUT: int = Field(default=10, ge=1)
    DB_STATEMENT_TIMEOUT: float | None = None
    DB_VALIDATION_TIMEOUT: float = Field(default=5.0, gt=0)

    HEALTH_CHECK_TIMEOUT: float = Field(default=5.0, gt=0)

    # Connection created by DatabaseManager on start-up when URL is set
    DEFAULT_CONNECTION_NAME: str = "default"
    DEFAULT_CONNECTION_DIALECT: str | None = None
    DEFAULT_CONNECTION_URL: str | None = None
    DEFAULT_CONNECTION_USER: str | None = None
    DEFAULT_CONNECTION_PASSWORD: str = ""


settings = Settings()
