"""
Database configuration settings.

Postgres connection for the Chunk Store, generated content, run status
and idempotency tables. A full DATABASE_URL wins over the POSTGRES_*
parts when set.

Dependencies: pydantic, pydantic_settings
System role: Database connection configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from studyloop.configs.base import BaseSettings


class DatabaseSettings(BaseSettings):
    """PostgreSQL connection and pool configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="POSTGRES_",
        case_sensitive=False,
        extra="ignore",
    )

    url: str | None = Field(
        default=None,
        validation_alias="DATABASE_URL",
        description="Complete SQLAlchemy async URL",
    )
    host: str = Field(default="localhost")
    port: int = Field(default=5432)
    user: str = Field(default="postgres")
    password: str = Field(default="postgres")
    db: str = Field(default="studyloop")
    require_ssl: bool = Field(default=False, description="Require TLS to the server")

    pool_size: int = Field(default=5, description="Connections kept per worker process")
    max_overflow: int = Field(default=10)
    pool_timeout: int = Field(default=30, description="Seconds to wait for a pooled connection")
    echo_sql: bool = Field(default=False)

    @property
    def async_database_url(self) -> str:
        """asyncpg URL; asyncpg takes ssl=require rather than sslmode."""
        if self.url:
            return self.url
        ssl_param = "?ssl=require" if self.require_ssl else ""
        return f"postgresql+asyncpg://{self.user}:{self.password}@{self.host}:{self.port}/{self.db}{ssl_param}"
