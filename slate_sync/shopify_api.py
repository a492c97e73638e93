from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

import httpx

from slate_sync.config import settings
from slate_sync.slate_env import SlateEnvironment, load_slate_environment

logger = logging.getLogger(__name__)

_THEMES_PATH = "/admin/themes.json"
# The basic-auth field has always carried a fixed placeholder; the token goes in the header.
_BASIC_AUTH_PLACEHOLDER = ("", "")


class ThemeApiError(RuntimeError):
    def __init__(self, *, message: str, status_code: int = 502) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedThemesResponseError(ThemeApiError):
    pass


class NoMainThemeError(ThemeApiError):
    pass


def _pretty(value: Any) -> str:
    return json.dumps(value, indent="\t")


def _has_errors(body: dict[str, Any]) -> bool:
    # Empty lists and objects still count as an error payload.
    errors = body.get("errors")
    return errors is not None and errors is not False and errors != "" and errors != 0


def find_main_theme_id(body: dict[str, Any]) -> Any:
    if _has_errors(body):
        errors = body["errors"]
        raise ThemeApiError(message=f"API request to fetch main theme ID failed: \n{_pretty(errors)}")

    themes = body.get("themes")
    if not isinstance(themes, list):
        raise MalformedThemesResponseError(
            message=f"Shopify response for {_THEMES_PATH} is not an array. {_pretty(body)}"
        )

    for theme in themes:
        if isinstance(theme, dict) and theme.get("role") == "main":
            return theme.get("id")

    raise NoMainThemeError(message=f"No main theme in response. {_pretty(themes)}", status_code=404)


class ShopifyThemesClient:
    def __init__(
        self,
        *,
        env_name: str | None = None,
        environment_loader: Callable[[str | None], SlateEnvironment] = load_slate_environment,
    ) -> None:
        self._timeout = settings.SHOPIFY_REQUEST_TIMEOUT_SECONDS
        self._env_name = env_name
        self._environment_loader = environment_loader

    async def fetch_main_theme_id(self) -> Any:
        environment = self._environment_loader(self._env_name)
        environment.ensure_valid()

        url = f"https://{environment.store}{_THEMES_PATH}"
        headers = {"X-Shopify-Access-Token": environment.password}
        body = await self._get_json(url=url, headers=headers)
        theme_id = find_main_theme_id(body)
        logger.info("Main theme for %s is %s", environment.store, theme_id)
        return theme_id

    async def _get_json(self, *, url: str, headers: dict[str, str]) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                async with client.stream("GET", url, headers=headers, auth=_BASIC_AUTH_PLACEHOLDER) as response:
                    raw = await response.aread()
        except httpx.RequestError as exc:
            raise ThemeApiError(message=f"Network error while calling Shopify: {exc}") from exc

        # Error payloads (e.g. 401 with {"errors": ...}) are reported from the body.
        try:
            body = json.loads(raw)
        except ValueError as exc:
            raise ThemeApiError(
                message=f"Shopify API returned invalid JSON ({response.status_code})"
            ) from exc

        if not isinstance(body, dict):
            raise MalformedThemesResponseError(message="Shopify API response must be a JSON object")
        return body
