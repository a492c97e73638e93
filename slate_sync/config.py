from __future__ import annotations

import logging
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# .env is read by pydantic-settings only; it is never copied into os.environ,
# so SLATE_* values in .env cannot shadow those of .env.<name>.


class Settings(BaseSettings):
    SLATE_SYNC_THEME_DIST_DIR: str = "dist"
    SLATE_SYNC_ENV_DIR: str = "."
    SLATE_SYNC_THEMEKIT_BIN: str = "theme"
    SHOPIFY_REQUEST_TIMEOUT_SECONDS: float = 20.0
    SLATE_SYNC_LOG_LEVEL: str = "INFO"

    @field_validator("SLATE_SYNC_LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"SLATE_SYNC_LOG_LEVEL must be a logging level name, got {value!r}")
        return level

    @property
    def theme_dist_dir(self) -> Path:
        return Path(self.SLATE_SYNC_THEME_DIST_DIR).expanduser()

    @property
    def env_dir(self) -> Path:
        return Path(self.SLATE_SYNC_ENV_DIR).expanduser()

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
