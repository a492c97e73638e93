"""Slate environment values (store, password, theme id) for a named environment.

Values come from ``.env`` for the default environment or ``.env.<name>`` for
a named one, and process environment variables win over file values.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from pydantic import PrivateAttr
from pydantic_settings import BaseSettings, SettingsConfigDict

from slate_sync.config import settings

logger = logging.getLogger(__name__)

DEFAULT_ENV_NAME = "development"

_PASSWORD_RE = re.compile(r"^\w+$", re.ASCII)
_THEME_ID_RE = re.compile(r"^(live|\d+)$")
_TIMEOUT_RE = re.compile(r"^\d+[smh]$")


class EnvironmentInvalidError(SystemExit):
    """Raised when the Slate environment cannot be used; exits the process with status 1."""

    def __init__(self, *, env_name: str, errors: list[str]) -> None:
        super().__init__(1)
        self.env_name = env_name
        self.errors = errors

    def __str__(self) -> str:
        return f"Some values in environment '{self.env_name}' are invalid: " + "; ".join(self.errors)


class SlateEnvironment(BaseSettings):
    SLATE_STORE: str = ""
    SLATE_PASSWORD: str = ""
    SLATE_THEME_ID: str = ""
    SLATE_IGNORE_FILES: str = ""
    SLATE_TIMEOUT: str = ""

    _env_name: str = PrivateAttr(default=DEFAULT_ENV_NAME)

    model_config = SettingsConfigDict(extra="ignore", str_strip_whitespace=True)

    @property
    def env_name(self) -> str:
        return self._env_name

    @property
    def store(self) -> str:
        return self.SLATE_STORE

    @property
    def password(self) -> str:
        return self.SLATE_PASSWORD

    @property
    def theme_id(self) -> str:
        return self.SLATE_THEME_ID

    @property
    def timeout(self) -> str | None:
        return self.SLATE_TIMEOUT or None

    @property
    def ignore_files(self) -> list[str]:
        return [entry for entry in self.SLATE_IGNORE_FILES.split(":") if entry]

    def validation_errors(self) -> list[str]:
        errors: list[str] = []

        if not self.store:
            errors.append("SLATE_STORE must not be empty")
        elif not self.store.endswith(".myshopify.com"):
            errors.append("SLATE_STORE must be a valid .myshopify.com URL")

        if not self.password:
            errors.append("SLATE_PASSWORD must not be empty")
        elif not _PASSWORD_RE.fullmatch(self.password):
            errors.append("SLATE_PASSWORD can only contain numbers, letters and _")

        if not self.theme_id:
            errors.append("SLATE_THEME_ID must not be empty")
        elif not _THEME_ID_RE.fullmatch(self.theme_id):
            errors.append(
                "SLATE_THEME_ID can be set to 'live' or a valid theme ID containing only numbers"
            )

        if self.SLATE_TIMEOUT and not _TIMEOUT_RE.fullmatch(self.SLATE_TIMEOUT):
            errors.append("SLATE_TIMEOUT must be a duration such as 30s, 2m or 1h")

        return errors

    def ensure_valid(self) -> None:
        errors = self.validation_errors()
        if not errors:
            return
        logger.error("Some values in environment '%s' are invalid:", self.env_name)
        for error in errors:
            logger.error("- %s", error)
        raise EnvironmentInvalidError(env_name=self.env_name, errors=errors)


def env_file_path(env_name: str | None = None, *, env_dir: Path | None = None) -> Path:
    base = env_dir if env_dir is not None else settings.env_dir
    if not env_name:
        return base / ".env"
    return base / f".env.{env_name}"


def load_slate_environment(env_name: str | None = None, *, env_dir: Path | None = None) -> SlateEnvironment:
    path = env_file_path(env_name, env_dir=env_dir)
    environment = SlateEnvironment(_env_file=path, _env_file_encoding="utf-8")
    environment._env_name = env_name or DEFAULT_ENV_NAME
    return environment
