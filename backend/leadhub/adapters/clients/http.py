# leadhub/adapters/clients/http.py
from __future__ import annotations

import logging
from typing import Protocol

import httpx

from ...config import settings
from ...domain.errors import TransportError

log = logging.getLogger(__name__)


class HttpGet(Protocol):
    async def __call__(self, url: str, *, headers: dict[str, str] | None = None) -> httpx.Response: ...


class HttpxGet:
    """
    Plain GET over httpx.

    Non-2xx and network failures surface as TransportError. The response body
    is fully read before returning.
    """

    def __init__(
        self,
        *,
        timeout_s: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = httpx.Timeout(timeout_s)
        self._transport = transport

    @classmethod
    def from_settings(cls) -> "HttpxGet":
        return cls(timeout_s=settings.HTTP_TIMEOUT_S)

    async def __call__(self, url: str, *, headers: dict[str, str] | None = None) -> httpx.Response:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.get(url, headers=headers or {})
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            log.warning("GET %s failed: %r", url, e)
            raise TransportError(f"request failed: {e}") from e

        if not resp.is_success:
            raise TransportError(f"HTTP {resp.status_code}")
        return resp
