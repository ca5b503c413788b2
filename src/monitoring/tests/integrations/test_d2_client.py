from __future__ import annotations

import asyncio
from types import SimpleNamespace

import httpx
import pytest

from src.monitoring.config.settings import D2Settings
from src.monitoring.integrations.d2_client import D2ApiError, D2Client


def test_get_sends_basic_auth_and_params(make_api) -> None:
    seen = SimpleNamespace(url=None, headers=None)

    def handler(request: httpx.Request) -> httpx.Response:
        seen.url = str(request.url)
        seen.headers = request.headers
        return httpx.Response(200, json={"dataSets": []})

    api = make_api(handler)
    resp = asyncio.run(api.get("/dataSets", params={"paging": "false"}))

    assert resp == {"dataSets": []}
    assert seen.url == "https://d2.example.org/api/dataSets?paging=false"
    assert seen.headers["Authorization"].startswith("Basic ")
    assert seen.headers["Accept"] == "application/json"


def test_http_errors_raise_d2_api_error(make_api) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text="Not found")

    api = make_api(handler)
    with pytest.raises(D2ApiError) as exc_info:
        asyncio.run(api.get("/dataSets/missing"))

    err = exc_info.value
    assert err.status_code == 404
    assert err.method == "GET"
    assert "Not found" in str(err)


def test_empty_body_returns_none(make_api) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200)

    api = make_api(handler)
    assert asyncio.run(api.put("/dataSets/ds1", json={"id": "ds1"})) is None


def test_context_manager_closes_client() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={})

    async def _run() -> D2Client:
        async with D2Client(
            base_url="https://d2.example.org/api", transport=httpx.MockTransport(handler)
        ) as api:
            await api.get("/system/info")
        return api

    api = asyncio.run(_run())
    assert api._http.is_closed


def test_settings_from_env(monkeypatch) -> None:
    monkeypatch.setenv("D2_BASE_URL", "https://d2.example.org/")
    monkeypatch.setenv("D2_USERNAME", "admin")
    monkeypatch.setenv("D2_PASSWORD", "district")
    monkeypatch.setenv("D2_HTTP_TIMEOUT_SECONDS", "5")

    settings = D2Settings.from_env()
    assert settings.api_url == "https://d2.example.org/api"
    assert settings.auth == ("admin", "district")
    assert settings.timeout_seconds == 5.0


def test_settings_require_base_url(monkeypatch) -> None:
    monkeypatch.delenv("D2_BASE_URL", raising=False)
    monkeypatch.setattr("src.monitoring.config.settings.load_environment", lambda: None)

    with pytest.raises(ValueError, match="D2_BASE_URL"):
        D2Settings.from_env()
