# shapecast/config.py
"""
SHAPECAST Configuration — Single source of truth via Pydantic Settings.

Resolution order: CLI flags > env vars (SHAPECAST_*) > .env file > defaults.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ShapecastConfig(BaseSettings):
    """Central configuration for SHAPECAST."""

    model_config = SettingsConfigDict(
        env_prefix="SHAPECAST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- LLM ---
    lm: str = "gpt-3.5-turbo"
    # Empty means the OpenAI SDK falls back to OPENAI_API_KEY.
    api_key: str = ""
    api_base: Optional[str] = None
    lm_temperature: float = 0.0

    # --- Extraction ---
    # Additional attempts after the first failure (4 attempts in total).
    max_retries: int = Field(default=3, ge=0)
    attempt_timeout: float = Field(default=60.0, gt=0)

    # --- Server ---
    host: str = "127.0.0.1"
    port: int = 8000

    # --- Logging ---
    log_level: str = "INFO"

    # --- Paths ---
    home_dir: Path = Field(default_factory=lambda: Path.home() / ".shapecast")

    @property
    def log_dir(self) -> Path:
        return self.home_dir / "logs"


@lru_cache(maxsize=1)
def get_config() -> ShapecastConfig:
    """Return the global config singleton."""
    return ShapecastConfig()
