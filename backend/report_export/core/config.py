"""Application settings and configuration helpers."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings."""

    app_name: str = "Research Report Export"
    env: Literal["development", "production", "test"] = "development"
    api_prefix: str = "/api"
    log_level: str = "INFO"
    filename_prefix: str = "research-report"

    image_fetch_timeout_seconds: float = 10.0
    image_max_bytes: int = Field(default=10 * 1024 * 1024, gt=0)

    # Optional TrueType face used for all PDF text (needed for non-Latin reports).
    pdf_font_path: Path | None = None

    raster_width_px: int = 800
    raster_padding_px: int = 40
    raster_scale: float = Field(default=2.0, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="REPORT_EXPORT_",
        env_file=".env",
        env_file_encoding="utf-8",
    )


@lru_cache
def get_settings() -> Settings:
    """Cached settings accessor."""
    return Settings()


def reload_settings() -> Settings:
    """Reset cache and create a new settings instance (used in tests)."""
    get_settings.cache_clear()
    return get_settings()


# Convenience alias used across the codebase.
settings = get_settings()
