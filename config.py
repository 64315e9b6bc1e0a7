"""
Configuration settings for the adaptive portal engine.

Uses Pydantic Settings for environment variable management with .env file support.
Only the caller-side drivers (sessions, card store helpers, CLI) read these;
the scoring and scheduling functions take everything as explicit arguments.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Adaptive Test Sessions
    # ========================================
    session_max_items: int = Field(
        default=10,
        ge=1,
        description="Maximum number of items administered in one adaptive test session",
    )
    session_time_limit_seconds: int | None = Field(
        default=None,
        ge=1,
        description="Optional time limit for an adaptive test session (None = untimed)",
    )

    # ========================================
    # Flashcard Review
    # ========================================
    card_update_max_retries: int = Field(
        default=3,
        ge=0,
        description="Retries after a compare-and-swap conflict when rating a card",
    )

    # ========================================
    # Mistake Analysis
    # ========================================
    mistake_focus_size: int = Field(
        default=3,
        ge=1,
        description="Number of grammar points recommended as focus areas",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Log level for the CLI stderr sink",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
