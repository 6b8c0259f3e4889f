from __future__ import annotations

import os
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator


class Settings(BaseModel):
    telegram_bot_token: str = Field(..., min_length=1)
    web_app_url: str
    shop_name: str = "KHQR Shop"
    telegram_api_base_url: str = "https://api.telegram.org"
    poll_timeout: int = Field(30, ge=0)

    @field_validator("web_app_url")
    @classmethod
    def validate_web_app_url(cls, v: str) -> str:
        # Telegram only opens web apps served over HTTPS.
        parsed = urlparse(v)
        if parsed.scheme != "https":
            raise ValueError("Web app URL must start with https://")
        if not parsed.netloc:
            raise ValueError("Web app URL must include a host")
        return v

    @field_validator("telegram_api_base_url")
    @classmethod
    def validate_api_base_url(cls, v: str) -> str:
        parsed = urlparse(v)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValueError("Telegram API base URL must be an http(s) URL")
        return v.rstrip("/")


def get_settings() -> Settings:
    bot_token = os.environ.get("TELEGRAM_BOT_TOKEN")
    if not bot_token:
        raise ValueError("TELEGRAM_BOT_TOKEN is required")
    web_app_url = os.environ.get("PRODUCTION_WEB_APP_URL")
    if not web_app_url:
        raise ValueError("PRODUCTION_WEB_APP_URL is required")
    return Settings(
        telegram_bot_token=bot_token,
        web_app_url=web_app_url,
        shop_name=os.environ.get("APP_NAME", "KHQR Shop"),
        telegram_api_base_url=os.environ.get(
            "TELEGRAM_API_BASE_URL", "https://api.telegram.org"
        ),
        poll_timeout=int(os.environ.get("TELEGRAM_POLL_TIMEOUT", "30")),
    )
