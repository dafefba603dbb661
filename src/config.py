"""Application settings loaded from the environment and an optional .env file.

Uses pydantic-settings for validation; the Postgres DSN is read from PGMQ_DSN.
"""

from pydantic import Field, PostgresDsn
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings for the PGMQ admin console (DSN, pool, paging, logging)."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = Field(default="PGMQ Admin")
    pgmq_dsn: PostgresDsn | None = Field(default=None)
    pool_size: int = Field(default=10, ge=1, description="Maximum connections in the asyncpg pool")
    default_page_size: int = Field(default=20, ge=1)
    max_page_size: int = Field(default=500, ge=1)
    operation_timeout: float | None = Field(default=30.0, gt=0, description="Seconds before a store call is abandoned")
    log_level: str = Field(default="info")
    log_json: bool = Field(default=False, description="Emit structured JSON log lines")


def get_settings() -> Settings:
    """Return the loaded settings instance."""
    return Settings()
