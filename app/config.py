"""
Service configuration, loaded from DEAL_FEED_* environment variables (or .env).
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DEAL_FEED_", env_file=".env", extra="ignore")

    source_path: Path = Field(default=Path("deals.xlsx"))
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
