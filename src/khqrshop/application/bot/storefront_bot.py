"""Telegram bot that greets ``/start`` with a button opening the shop web app."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Mapping, Optional

from ...domain.errors import NotificationError
from ...domain.shared import BotApiProtocol

logger = logging.getLogger(__name__)

START_COMMAND = "/start"


def is_start_command(text: str) -> bool:
    """``/start`` as the first word, optionally addressed as ``/start@SomeBot``."""
    words = text.split()
    if not words:
        return False
    return words[0].split("@", 1)[0] == START_COMMAND


class StorefrontBot:
    """Long-polls the bot API and answers ``/start`` with the shop's web app.

    Every other update is acknowledged and ignored.
    """

    def __init__(
        self,
        api: BotApiProtocol,
        web_app_url: str,
        *,
        shop_name: str = "KHQR Shop",
        poll_timeout: int = 30,
        retry_delay: float = 5.0,
    ):
        self.api = api
        self.web_app_url = web_app_url
        self.shop_name = shop_name
        self.poll_timeout = poll_timeout
        self.retry_delay = retry_delay
        self.offset: Optional[int] = None
        self._running = False

    def welcome_message(self) -> str:
        return (
            f"🎉 *Welcome to {self.shop_name}!* 🎉\n\n"
            "Tap the button below to start browsing our live shop."
        )

    def keyboard(self) -> Dict[str, Any]:
        return {
            "inline_keyboard": [
                [{"text": "🛍️ Open Shop", "web_app": {"url": self.web_app_url}}]
            ]
        }

    async def handle_update(self, update: Mapping[str, Any]) -> bool:
        """Reply to a ``/start`` message. Returns whether a welcome was sent."""
        message = update.get("message") or {}
        chat_id = (message.get("chat") or {}).get("id")
        text = message.get("text") or ""
        if chat_id is None or not is_start_command(text):
            return False

        logger.info("Received /start from chat %s", chat_id)
        try:
            await self.api.send_message(
                chat_id,
                self.welcome_message(),
                parse_mode="Markdown",
                reply_markup=self.keyboard(),
            )
        except NotificationError as e:
            logger.error("Error sending message to %s: %s", chat_id, e)
            return False
        logger.info("Sent welcome message to %s", chat_id)
        return True

    async def poll_once(self) -> int:
        """Fetch one batch of updates and answer them.

        The offset moves past every update in the batch, answered or not, so
        Telegram does not deliver it again.
        """
        updates = await self.api.get_updates(
            offset=self.offset, timeout=self.poll_timeout
        )
        sent = 0
        for update in updates:
            update_id = update.get("update_id")
            if isinstance(update_id, int):
                self.offset = update_id + 1
            if await self.handle_update(update):
                sent += 1
        return sent

    async def run(self) -> None:
        """Poll until ``stop`` is called; polling failures are logged and retried."""
        self._running = True
        while self._running:
            try:
                await self.poll_once()
            except NotificationError as e:
                logger.error("Polling error: %s", e)
                if self._running:
                    await asyncio.sleep(self.retry_delay)

    def stop(self) -> None:
        self._running = False
