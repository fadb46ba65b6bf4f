"""Application configuration.

Configuration is loaded from environment variables. For local development, you can provide a
`.env` file and set `COURTDECK_ENV_FILE` to point to it.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """courtdeck settings.

    All fields are environment-configurable. Prefix is `COURTDECK_`.
    """

    model_config = SettingsConfigDict(
        env_prefix="COURTDECK_",
        env_file=None,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Core
    log_level: str = Field(default="INFO")

    # LLM
    llm_provider: Literal["openai", "gemini"] = Field(default="openai")

    openai_api_key: str | None = Field(default=None)
    openai_base_url: str | None = Field(default=None)
    openai_model: str = Field(default="gpt-4o-mini")

    gemini_api_key: str | None = Field(default=None)
    gemini_base_url: str = Field(default="https://generativelanguage.googleapis.com/v1beta")
    gemini_model: str = Field(default="gemini-2.5-flash-lite")

    # Requests
    default_timeout_s: float = Field(default=60.0, gt=0.0, le=600.0)

    deck_temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    deck_max_tokens: int = Field(default=4096, ge=256, le=32768)
    citation_temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    citation_max_tokens: int = Field(default=4000, ge=256, le=32768)

    # Generated deck bounds
    min_slides: int = Field(default=3, ge=1, le=50)
    max_slides: int = Field(default=8, ge=1, le=50)

    @model_validator(mode="after")
    def _check_slide_bounds(self) -> "Settings":
        if self.min_slides > self.max_slides:
            raise ValueError("min_slides must not exceed max_slides")
        return self


def load_settings() -> Settings:
    """Load settings from env.

    Returns:
        Settings: Parsed settings.
    """

    env_file_override = os.getenv("COURTDECK_ENV_FILE")
    if env_file_override:
        env_path = Path(env_file_override)
        return Settings(_env_file=env_path)

    default_env = Path.cwd() / ".env"
    if default_env.exists():
        return Settings(_env_file=default_env)

    return Settings()
