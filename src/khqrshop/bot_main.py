from __future__ import annotations

import asyncio
import logging

from .application.bot.storefront_bot import StorefrontBot
from .envs.bot_env import Settings, get_settings
from .infrastructure.telegram.telegram_client import AsyncTelegramClient


async def run_bot(settings: Settings) -> None:
    async with AsyncTelegramClient(
        settings.telegram_bot_token,
        base_url=settings.telegram_api_base_url,
        timeout=10.0,
    ) as api:
        bot = StorefrontBot(
            api,
            settings.web_app_url,
            shop_name=settings.shop_name,
            poll_timeout=settings.poll_timeout,
        )
        await bot.run()


def main() -> None:
    """Main entry point for the storefront Telegram bot."""
    logging.basicConfig(level=logging.INFO)
    try:
        settings = get_settings()
    except ValueError as e:
        print(f"FATAL ERROR: {e}")
        raise SystemExit(1) from e

    print("Telegram bot started.")
    print(f"It will point users to the live website: {settings.web_app_url}")
    print("Send the /start command to your bot on Telegram.")

    try:
        asyncio.run(run_bot(settings))
    except KeyboardInterrupt:
        print("Bot stopped.")


if __name__ == "__main__":
    main()
