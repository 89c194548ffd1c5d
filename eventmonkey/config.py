"""Configuration management for the EventMonkey event service."""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Remote catalog
    ticketmaster_api_key: str = Field(default="", description="TicketMaster Discovery API key")
    ticketmaster_base_url: str = Field(
        default="https://app.ticketmaster.com/discovery/v2",
        description="TicketMaster Discovery API base URL",
    )
    ticketmaster_timeout: float = Field(default=30.0, description="HTTP timeout in seconds")

    # Relational store
    database_url: str = Field(
        default="sqlite+aiosqlite:///data/eventmonkey.db",
        description="SQLAlchemy async database URL",
    )

    # Search
    default_search_limit: int = Field(
        default=20, gt=0, description="Result limit used when a search sets none"
    )

    # Server config
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:3001",
        description="Comma-separated CORS origins",
    )
    log_level: str = Field(default="INFO", description="Logging level")

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins into list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin]

    @property
    def has_remote_catalog(self) -> bool:
        """Check if the TicketMaster catalog is configured."""
        return bool(self.ticketmaster_api_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Configure application logging."""
    if settings is None:
        settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # Suppress verbose third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
