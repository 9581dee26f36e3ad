"""Database configuration using Pydantic Settings.

SQLite (aiosqlite) is the default for development and tests; PostgreSQL
(asyncpg) is supported for deployments that need the engineer row lock to
hold across processes.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """
    Database connection settings, overridable via DB_-prefixed variables.

    Example environment variables:
        DB_DRIVER=postgresql+asyncpg
        DB_HOST=localhost
        DB_PORT=5432
        DB_NAME=staffing
        DB_USER=staffing
        DB_PASSWORD=secret
    """

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    driver: str = Field(
        default="sqlite+aiosqlite",
        description="Database driver (postgresql+asyncpg or sqlite+aiosqlite)"
    )

    # PostgreSQL settings
    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    name: str = Field(default="staffing", description="Database name")
    user: str = Field(default="", description="Database user")
    password: str = Field(default="", description="Database password")

    # SQLite settings
    sqlite_path: Path = Field(
        default=Path("data/staffing.db"),
        description="Path to SQLite database file"
    )

    # Connection pool settings (PostgreSQL only; SQLite uses NullPool)
    pool_size: int = Field(default=5, ge=1, le=100, description="Connections kept in the pool")
    max_overflow: int = Field(default=10, ge=0, le=100, description="Connections above pool_size")
    pool_timeout: int = Field(default=30, ge=1, description="Seconds to wait for a pooled connection")
    pool_recycle: int = Field(default=1800, ge=60, description="Seconds before a connection is recycled")
    pool_pre_ping: bool = Field(default=True, description="Test connections before use")

    echo_sql: bool = Field(default=False, description="Log all SQL statements")
    query_timeout: int = Field(default=30, ge=1, description="Driver-level timeout in seconds")

    @computed_field
    @property
    def is_sqlite(self) -> bool:
        return "sqlite" in self.driver.lower()

    @computed_field
    @property
    def is_postgres(self) -> bool:
        return "postgres" in self.driver.lower()

    @computed_field
    @property
    def async_url(self) -> str:
        """
        Get the async database URL.

        For SQLite the parent directory of the database file is created.
        """
        if self.is_sqlite:
            self.sqlite_path.parent.mkdir(parents=True, exist_ok=True)
            return f"sqlite+aiosqlite:///{self.sqlite_path.absolute()}"

        auth = ""
        if self.user:
            auth = f"{self.user}"
            if self.password:
                auth += f":{self.password}"
            auth += "@"

        return f"{self.driver}://{auth}{self.host}:{self.port}/{self.name}"

    def get_connect_args(self) -> dict:
        """
        Get driver-specific connection arguments.

        Returns:
            Dictionary passed to create_async_engine(connect_args=...)
        """
        if self.is_sqlite:
            return {
                "check_same_thread": False,
                "timeout": self.query_timeout,
            }
        return {"command_timeout": self.query_timeout}


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """
    Get cached database settings instance.

    Returns:
        DatabaseSettings: Cached settings loaded from environment.
    """
    return DatabaseSettings()
