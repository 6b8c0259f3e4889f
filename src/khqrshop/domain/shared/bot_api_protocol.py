"""Protocol interface for the chat bot API the storefront bot polls."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Protocol

from .notifier_protocol import ChatId


class BotApiProtocol(Protocol):
    """Receives chat updates by long polling and replies to them."""

    async def get_updates(
        self, offset: Optional[int] = None, timeout: int = 30
    ) -> List[Dict[str, Any]]:
        """Fetch updates newer than ``offset``, waiting up to ``timeout`` seconds.

        Raises:
            NotificationError: The bot API could not be reached or refused
        """
        ...

    async def send_message(
        self,
        chat_id: ChatId,
        text: str,
        parse_mode: Optional[str] = "Markdown",
        *,
        reply_markup: Optional[Mapping[str, Any]] = None,
    ) -> None: ...
