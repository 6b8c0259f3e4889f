from __future__ import annotations

import logging

import uvicorn

from .envs.shop_env import get_settings


def main() -> None:
    """Main entry point for the shop API."""

    settings = get_settings()
    logging.basicConfig(level=logging.DEBUG if settings.api_debug else logging.INFO)

    print(f"Starting {settings.app_name} v{settings.app_version}")
    print(f"API will be available at: http://{settings.api_host}:{settings.api_port}")
    print(f"API Documentation: http://{settings.api_host}:{settings.api_port}/docs")
    if not (settings.bakong_api_token and settings.bakong_merchant_id):
        print("Warning: Bakong credentials are not set; payments will fail.")
    if not (settings.telegram_bot_token and settings.telegram_admin_chat_id):
        print("Warning: Telegram credentials are not set; orders will fail.")

    uvicorn.run(
        "khqrshop.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
        log_level="info",
    )


if __name__ == "__main__":
    main()
