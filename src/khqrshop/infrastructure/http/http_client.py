from __future__ import annotations

from typing import Any, Dict, Optional, Type
from types import TracebackType

import httpx


class AsyncHttpClient:
    """Shared transport for the Bakong, Telegram and shop API clients.

    Paths are joined onto ``base_url`` and non-2xx responses raise
    ``httpx.HTTPStatusError``; each client translates that into its own
    domain error. ``headers`` carries the Bakong bearer token and
    ``transport`` lets tests swap in ``httpx.MockTransport`` or an ASGI app.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        *,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            timeout=timeout, headers=headers, transport=transport
        )

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self._base_url}/{path.lstrip('/')}"

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        resp = await self._client.get(self._url(path), **kwargs)
        resp.raise_for_status()
        return resp

    async def post(
        self,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        resp = await self._client.post(self._url(path), json=json, **kwargs)
        resp.raise_for_status()
        return resp

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHttpClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        await self.aclose()
