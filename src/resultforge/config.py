"""Configuration settings for resultforge."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from ``RESULTFORGE_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="RESULTFORGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = "INFO"
    log_json_format: bool = True

    # API client
    client_config: Path | None = None
    api_key: str | None = None
    api_secret: str | None = None
    api_timeout: float = 30.0


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
