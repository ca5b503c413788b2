"""Async client for the platform (DHIS2) REST API.

Purpose
- One place for base URL, basic auth, timeouts and JSON decoding.
- Surface HTTP failures as `D2ApiError` without retrying; callers decide.

Credentials are never logged.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from src.monitoring.config.settings import D2Settings

logger = logging.getLogger(__name__)


class D2ApiError(RuntimeError):
    def __init__(self, status_code: int, text: str, *, method: str = "", url: str = "") -> None:
        super().__init__(f"HTTP {status_code}: {text}")
        self.status_code = status_code
        self.text = text
        self.method = method
        self.url = url


class D2Client:
    def __init__(
        self,
        *,
        base_url: str,
        auth: tuple[str, str] | None = None,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            auth=auth,
            timeout=timeout_seconds,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: D2Settings) -> "D2Client":
        return cls(
            base_url=settings.api_url,
            auth=settings.auth,
            timeout_seconds=settings.timeout_seconds,
        )

    @classmethod
    def from_env(cls) -> "D2Client":
        return cls.from_settings(D2Settings.from_env())

    async def __aenter__(self) -> "D2Client":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request_json(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        resp = await self._http.request(method, path, params=params, json=json)
        logger.debug("%s %s -> %s", method, resp.url, resp.status_code)

        if resp.status_code >= 400:
            raise D2ApiError(resp.status_code, resp.text, method=method, url=str(resp.url))
        if not resp.content:
            return None
        return resp.json()

    async def get(self, path: str, *, params: dict[str, Any] | None = None) -> Any:
        return await self._request_json("GET", path, params=params)

    async def post(
        self, path: str, *, json: Any = None, params: dict[str, Any] | None = None
    ) -> Any:
        return await self._request_json("POST", path, params=params, json=json)

    async def put(self, path: str, *, json: Any = None) -> Any:
        return await self._request_json("PUT", path, json=json)
