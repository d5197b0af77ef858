"""
Configuration settings for satx.

Uses Pydantic Settings for environment variable management with .env file support.
All variables are prefixed with SATX_ (e.g. SATX_STATE_DB_PATH).
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from satx.adaptive.mastery import EngineConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SATX_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Storage & Content
    # ========================================
    state_db_path: Path = Field(
        default=Path.home() / ".satx" / "state.db",
        description="SQLite file holding the learner model",
    )
    catalog_path: Path | None = Field(
        default=None,
        description="JSON catalog of lessons and quizzes (None for the bundled sample)",
    )

    # ========================================
    # Sessions
    # ========================================
    feed_count: int = Field(
        default=20,
        ge=1,
        description="Quizzes per practice session",
    )
    random_seed: int | None = Field(
        default=None,
        description="Seed for reproducible selection (None for random)",
    )

    # ========================================
    # Engine Tuning
    # ========================================
    history_limit: int = Field(
        default=500,
        ge=1,
        description="Maximum result history entries kept",
    )
    anti_repeat_window: int = Field(
        default=5,
        ge=0,
        description="Recent history entries excluded from reselection",
    )
    review_injection_rate: float = Field(
        default=0.15,
        ge=0.0,
        le=1.0,
        description="Probability of serving the weakest topic instead of the weighted pick",
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

    # ========================================
    # Helper Methods
    # ========================================
    def get_engine_config(self) -> EngineConfig:
        """Engine constants with the configured overrides applied."""
        return EngineConfig(
            history_limit=self.history_limit,
            anti_repeat_window=self.anti_repeat_window,
            review_injection_rate=self.review_injection_rate,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
