from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Type
from types import TracebackType

import httpx

from ...domain.errors import MissingCredentialsError, NotificationError
from ...domain.shared import ChatId
from ..http.http_client import AsyncHttpClient


def _describe(response: httpx.Response) -> str:
    """Telegram explains failures in ``description``; fall back to the body."""
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and body.get("description"):
        return str(body["description"])
    return response.text


class AsyncTelegramClient:
    """Asynchronous client for the Telegram Bot API.

    Covers ``sendMessage`` for order notifications and the storefront bot's
    welcome reply, and ``getUpdates`` for the bot's long polling.
    """

    def __init__(
        self,
        bot_token: Optional[str],
        base_url: str = "https://api.telegram.org",
        timeout: float = 10.0,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not bot_token:
            raise MissingCredentialsError("Telegram bot token is not configured")
        self._http = AsyncHttpClient(
            f"{base_url.rstrip('/')}/bot{bot_token}",
            timeout=timeout,
            transport=transport,
        )

    async def _call(self, method: str, body: Dict[str, Any], **kwargs: Any) -> Any:
        try:
            resp = await self._http.post(f"/{method}", json=body, **kwargs)
            result = resp.json()
        except httpx.HTTPStatusError as e:
            raise NotificationError(
                f"Telegram {method} failed ({e.response.status_code}): "
                f"{_describe(e.response)}"
            ) from e
        except httpx.RequestError as e:
            raise NotificationError(f"Could not connect to Telegram: {e}") from e
        except ValueError as e:
            raise NotificationError(f"Telegram sent non-JSON body: {e}") from e
        if not isinstance(result, dict) or not result.get("ok"):
            raise NotificationError(f"Telegram did not accept {method}")
        return result.get("result")

    async def send_message(
        self,
        chat_id: ChatId,
        text: str,
        parse_mode: Optional[str] = "Markdown",
        *,
        reply_markup: Optional[Mapping[str, Any]] = None,
    ) -> None:
        body: Dict[str, Any] = {"chat_id": chat_id, "text": text}
        if parse_mode:
            body["parse_mode"] = parse_mode
        if reply_markup is not None:
            body["reply_markup"] = dict(reply_markup)
        await self._call("sendMessage", body)

    async def get_updates(
        self, offset: Optional[int] = None, timeout: int = 30
    ) -> List[Dict[str, Any]]:
        """Long-poll for new message updates.

        Telegram holds the request open for up to ``timeout`` seconds, so the
        HTTP timeout is extended past it.
        """
        body: Dict[str, Any] = {"timeout": timeout, "allowed_updates": ["message"]}
        if offset is not None:
            body["offset"] = offset
        result = await self._call("getUpdates", body, timeout=timeout + 10)
        if not isinstance(result, list):
            raise NotificationError("Telegram getUpdates did not return a list")
        return result

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "AsyncTelegramClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.aclose()
