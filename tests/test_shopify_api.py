from __future__ import annotations

import asyncio

import httpx
import pytest

from slate_sync import shopify_api
from slate_sync.shopify_api import (
    MalformedThemesResponseError,
    NoMainThemeError,
    ShopifyThemesClient,
    ThemeApiError,
    find_main_theme_id,
)
from slate_sync.slate_env import EnvironmentInvalidError


def _client_with_body(environment, body: dict) -> ShopifyThemesClient:
    client = ShopifyThemesClient(environment_loader=lambda _name: environment)

    async def fake_get_json(*, url: str, headers: dict[str, str]):
        return body

    client._get_json = fake_get_json  # type: ignore[method-assign]
    return client


def test_fetch_main_theme_id_returns_main_theme(make_environment):
    client = _client_with_body(
        make_environment(),
        {"themes": [{"id": 1, "role": "unpublished"}, {"id": 2, "role": "main"}]},
    )

    assert asyncio.run(client.fetch_main_theme_id()) == 2


def test_fetch_main_theme_id_uses_first_main_theme(make_environment):
    client = _client_with_body(
        make_environment(),
        {"themes": [{"id": 7, "role": "main"}, {"id": 8, "role": "main"}]},
    )

    assert asyncio.run(client.fetch_main_theme_id()) == 7


def test_fetch_main_theme_id_without_main_theme_raises(make_environment):
    client = _client_with_body(make_environment(), {"themes": [{"id": 1, "role": "unpublished"}]})

    with pytest.raises(NoMainThemeError, match="No main theme in response."):
        asyncio.run(client.fetch_main_theme_id())


def test_fetch_main_theme_id_with_api_errors_raises(make_environment):
    client = _client_with_body(make_environment(), {"errors": "invalid token"})

    with pytest.raises(ThemeApiError, match="API request to fetch main theme ID failed") as excinfo:
        asyncio.run(client.fetch_main_theme_id())

    assert '"invalid token"' in str(excinfo.value)
    assert not isinstance(excinfo.value, (NoMainThemeError, MalformedThemesResponseError))


def test_fetch_main_theme_id_with_non_list_themes_raises(make_environment):
    client = _client_with_body(make_environment(), {"themes": "not-an-array"})

    with pytest.raises(MalformedThemesResponseError, match="is not an array"):
        asyncio.run(client.fetch_main_theme_id())


def test_fetch_main_theme_id_exits_on_invalid_environment(make_environment):
    requested: list[str] = []
    client = ShopifyThemesClient(environment_loader=lambda _name: make_environment(SLATE_STORE=""))

    async def fake_get_json(*, url: str, headers: dict[str, str]):
        requested.append(url)
        return {"themes": []}

    client._get_json = fake_get_json  # type: ignore[method-assign]

    async def scenario():
        with pytest.raises(EnvironmentInvalidError):
            await client.fetch_main_theme_id()

    asyncio.run(scenario())
    assert requested == []


def test_fetch_main_theme_id_sends_access_token_header(make_environment, monkeypatch):
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"themes": [{"id": 42, "role": "main", "name": "Dawn"}]})

    real_async_client = httpx.AsyncClient
    monkeypatch.setattr(
        shopify_api.httpx,
        "AsyncClient",
        lambda **kwargs: real_async_client(transport=httpx.MockTransport(handler), **kwargs),
    )
    client = ShopifyThemesClient(environment_loader=lambda _name: make_environment())

    assert asyncio.run(client.fetch_main_theme_id()) == 42

    request = captured[0]
    assert str(request.url) == "https://example.myshopify.com/admin/themes.json"
    assert request.method == "GET"
    assert request.headers["X-Shopify-Access-Token"] == "shpat_token123"
    # Basic auth carries the empty placeholder rather than the token.
    assert request.headers["Authorization"] == "Basic Og=="


def test_error_status_body_is_reported_as_api_error(make_environment, monkeypatch):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"errors": "[API] Invalid API key or access token"})

    real_async_client = httpx.AsyncClient
    monkeypatch.setattr(
        shopify_api.httpx,
        "AsyncClient",
        lambda **kwargs: real_async_client(transport=httpx.MockTransport(handler), **kwargs),
    )
    client = ShopifyThemesClient(environment_loader=lambda _name: make_environment())

    with pytest.raises(ThemeApiError, match="Invalid API key or access token"):
        asyncio.run(client.fetch_main_theme_id())


def test_network_error_is_wrapped(make_environment, monkeypatch):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    real_async_client = httpx.AsyncClient
    monkeypatch.setattr(
        shopify_api.httpx,
        "AsyncClient",
        lambda **kwargs: real_async_client(transport=httpx.MockTransport(handler), **kwargs),
    )
    client = ShopifyThemesClient(environment_loader=lambda _name: make_environment())

    with pytest.raises(ThemeApiError, match="Network error while calling Shopify"):
        asyncio.run(client.fetch_main_theme_id())


def test_invalid_json_is_reported(make_environment, monkeypatch):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="<html>Bad gateway</html>")

    real_async_client = httpx.AsyncClient
    monkeypatch.setattr(
        shopify_api.httpx,
        "AsyncClient",
        lambda **kwargs: real_async_client(transport=httpx.MockTransport(handler), **kwargs),
    )
    client = ShopifyThemesClient(environment_loader=lambda _name: make_environment())

    with pytest.raises(ThemeApiError, match="invalid JSON"):
        asyncio.run(client.fetch_main_theme_id())


@pytest.mark.parametrize("errors", [[], {}])
def test_empty_errors_payload_is_still_an_api_error(errors):
    with pytest.raises(ThemeApiError, match="API request to fetch main theme ID failed"):
        find_main_theme_id({"errors": errors, "themes": [{"id": 5, "role": "main"}]})


def test_null_errors_field_is_ignored():
    assert find_main_theme_id({"errors": None, "themes": [{"id": 5, "role": "main"}]}) == 5
