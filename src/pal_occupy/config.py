"""Configuration for the pal-occupy bot."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings, read from the environment and an optional ``.env`` file."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="PAL_OCCUPY_", extra="ignore"
    )

    discord_token: SecretStr | None = Field(
        default=None, description="Bot token; the Discord client is not started when unset"
    )
    sync_commands: bool = Field(
        default=True, description="Register the slash commands globally on startup"
    )

    database_url: str = Field(default="sqlite:///pal_occupy.db", description="SQLAlchemy URL")
    database_echo: bool = Field(default=False, description="Log emitted SQL")
    database_pool_size: int = Field(default=5, ge=1)
    database_max_overflow: int = Field(default=10, ge=0)
    database_pool_recycle: int = Field(default=1800, description="Seconds before reconnecting")
    database_pool_timeout: int = Field(default=30, ge=1)

    lease_days: int = Field(default=14, ge=1, description="Length of a granted lease")
    default_page_size: int = Field(default=20, ge=1, le=20)
    max_page_size: int = Field(default=20, ge=1, le=20)

    log_level: str = Field(default="INFO", description="Root logging level")
    http_host: str = Field(default="127.0.0.1", description="Host interface for the HTTP API")
    http_port: int = Field(default=8000, description="TCP port for the HTTP API")
    cors_origins: list[str] = Field(
        default_factory=list, description="Origins allowed to call the HTTP API from a browser"
    )


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    return Settings()
