"""
Configuration settings for coach-progression.

Uses Pydantic Settings for environment variable management with .env file support.
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
        env_prefix="COACH_",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Progress Storage
    # ========================================
    progress_file: str = Field(
        default="progress.json",
        description="JSON progress document used by the CLI",
    )

    # ========================================
    # Competence Ledger
    # ========================================
    ledger_round_to: int = Field(
        default=1,
        ge=0,
        le=6,
        description="Decimal places kept for every ledger slice",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
