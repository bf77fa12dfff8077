"""
Sequence Service Application Configuration

Configuration management with environment variable support.
Implements defaults and validation for database, cache and API settings.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from typing import Optional
from functools import lru_cache
from dotenv import load_dotenv
from urllib.parse import quote_plus

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings with validation and defaults."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    # Environment settings
    ENVIRONMENT: str = Field(
        default="development", description="Application environment"
    )

    # Database configuration
    DATABASE_URL: Optional[str] = Field(
        default=None,
        description="Full database URL; overrides the DB_* connection parts",
    )
    DB_HOST: str = Field(default="localhost", description="PostgreSQL host")
    DB_PORT: int = Field(default=5432, ge=1, le=65535, description="PostgreSQL port")
    DB_USER: str = Field(default="postgres", description="PostgreSQL user")
    DB_PASSWORD: str = Field(default="postgres", description="PostgreSQL password")
    DB_NAME: str = Field(default="sequences", description="PostgreSQL database")
    DB_MAX_CONNECTIONS: int = Field(
        default=10, ge=1, le=200, description="Maximum concurrent pool connections"
    )
    DB_MIN_CONNECTIONS: int = Field(
        default=1, ge=1, le=200, description="Connections kept open in the pool"
    )
    DB_MAX_CONN_IDLE_TIME: int = Field(
        default=30, ge=1, le=86400, description="Connection recycle time in seconds"
    )

    # Pagination
    MAX_SEQUENCE_PAGINATION: int = Field(
        default=50, ge=1, le=1000, description="Maximum sequences per page"
    )

    # In-process cache
    CACHE_LIFE_WINDOW: int = Field(
        default=30, ge=1, le=86400, description="Cache entry time to live in seconds"
    )
    MAX_CACHE_MEMORY: int = Field(
        default=10, ge=0, le=4096, description="Cache memory ceiling in MB (0 = unbounded)"
    )
    CACHE_SHARDS: int = Field(
        default=2, ge=1, le=1024, description="Number of cache shards"
    )

    # API configuration
    API_HOST: str = Field(default="0.0.0.0", description="API server host")
    API_PORT: int = Field(default=8000, ge=1, le=65535, description="API server port")

    # Development and debugging
    DEBUG: bool = Field(default=False, description="Echo SQL statements")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_JSON: bool = Field(default=False, description="Render logs as JSON")

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v):
        """Validate database URL format."""
        if v is None:
            return v
        if not v.startswith(
            ("postgresql://", "postgresql+asyncpg://", "sqlite+aiosqlite://")
        ):
            raise ValueError(
                "DATABASE_URL must be a PostgreSQL or sqlite+aiosqlite URL"
            )
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment value."""
        allowed = ["development", "test", "staging", "production"]
        if v not in allowed:
            raise ValueError(f"ENVIRONMENT must be one of: {allowed}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of: {allowed}")
        return v.upper()

    @property
    def database_url(self) -> str:
        """SQLAlchemy async URL, built from the DB_* parts unless overridden."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{quote_plus(self.DB_USER)}:"
            f"{quote_plus(self.DB_PASSWORD)}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    @property
    def database_pool_size(self) -> int:
        """Connections kept open (pool floor)."""
        return min(self.DB_MIN_CONNECTIONS, self.DB_MAX_CONNECTIONS)

    @property
    def database_max_overflow(self) -> int:
        """Connections allowed above the floor, up to DB_MAX_CONNECTIONS."""
        return self.DB_MAX_CONNECTIONS - self.database_pool_size

    @property
    def debug(self) -> bool:
        """Alias for DEBUG."""
        return self.DEBUG


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
