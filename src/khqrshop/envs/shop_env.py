from __future__ import annotations

import os
from typing import Optional
from urllib.parse import urlparse

from pydantic import BaseModel, field_validator

from ..codec.khqr import DEFAULT_MERCHANT_CITY, MerchantProfile


def _validate_url(name: str, v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    parsed = urlparse(v)
    if parsed.scheme not in {"http", "https"}:
        raise ValueError(f"{name} must start with http:// or https://")
    if not parsed.netloc:
        raise ValueError(f"{name} must include a host")
    return v.rstrip("/")


class Settings(BaseModel):
    """Typed shop API settings built from environment variables.

    Credentials are optional so the API can start without them; requests that
    need a missing credential fail with ``MissingCredentialsError``.
    """

    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = False
    api_cors_origins: list[str] = ["*"]

    app_name: str = "KHQR Shop"
    app_version: str = "1.0.0"

    bakong_base_url: str = "https://api-bakong.nbc.gov.kh"
    bakong_api_token: Optional[str] = None
    bakong_merchant_id: Optional[str] = None
    bakong_merchant_name: Optional[str] = None
    bakong_merchant_city: str = DEFAULT_MERCHANT_CITY
    bakong_deeplink_callback: Optional[str] = None
    bakong_app_name: str = "KHQR Shop"
    bakong_app_icon_url: Optional[str] = None

    telegram_api_base_url: str = "https://api.telegram.org"
    telegram_bot_token: Optional[str] = None
    telegram_admin_chat_id: Optional[str] = None

    @field_validator("bakong_base_url", "telegram_api_base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v:
            raise ValueError("Base URL cannot be empty")
        return _validate_url("Base URL", v)

    @field_validator("bakong_deeplink_callback", "bakong_app_icon_url")
    @classmethod
    def validate_optional_url(cls, v: Optional[str]) -> Optional[str]:
        return _validate_url("URL", v)

    def merchant_profile(self) -> MerchantProfile:
        """Merchant identity as configured; the codec rejects blank values."""
        return MerchantProfile(
            account_id=self.bakong_merchant_id or "",
            display_name=self.bakong_merchant_name or "",
            city=self.bakong_merchant_city,
        )


def get_settings() -> Settings:
    """Return typed settings instance sourced from env vars."""
    return Settings(
        api_host=os.environ.get("API_HOST", "0.0.0.0"),
        api_port=int(os.environ.get("API_PORT", "8000")),
        api_debug=os.environ.get("API_DEBUG", "false").lower() == "true",
        api_cors_origins=os.environ.get("API_CORS_ORIGINS", "*").split(","),
        app_name=os.environ.get("APP_NAME", "KHQR Shop"),
        app_version=os.environ.get("APP_VERSION", "1.0.0"),
        bakong_base_url=os.environ.get(
            "BAKONG_BASE_URL", "https://api-bakong.nbc.gov.kh"
        ),
        bakong_api_token=os.environ.get("BAKONG_API_TOKEN") or None,
        bakong_merchant_id=os.environ.get("BAKONG_MERCHANT_ID") or None,
        bakong_merchant_name=os.environ.get("BAKONG_MERCHANT_NAME") or None,
        bakong_merchant_city=os.environ.get(
            "BAKONG_MERCHANT_CITY", DEFAULT_MERCHANT_CITY
        ),
        bakong_deeplink_callback=os.environ.get("BAKONG_DEEPLINK_CALLBACK") or None,
        bakong_app_name=os.environ.get("BAKONG_APP_NAME", "KHQR Shop"),
        bakong_app_icon_url=os.environ.get("BAKONG_APP_ICON_URL") or None,
        telegram_api_base_url=os.environ.get(
            "TELEGRAM_API_BASE_URL", "https://api.telegram.org"
        ),
        telegram_bot_token=os.environ.get("TELEGRAM_BOT_TOKEN") or None,
        telegram_admin_chat_id=os.environ.get("TELEGRAM_ADMIN_CHAT_ID") or None,
    )
