from __future__ import annotations

import os
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator


class Settings(BaseModel):
    shop_base_url: str
    poll_interval: float = Field(3.0, gt=0)
    timeout: float = Field(180.0, gt=0)

    @field_validator("shop_base_url")
    @classmethod
    def validate_shop_base_url(cls, v: str) -> str:
        if not v:
            raise ValueError("Shop base URL cannot be empty")
        parsed = urlparse(v)
        if parsed.scheme not in {"http", "https"}:
            raise ValueError("Shop base URL must start with http:// or https://")
        if not parsed.netloc:
            raise ValueError("Shop base URL must include a host")
        return v.rstrip("/")


def get_settings() -> Settings:
    shop_base_url = os.environ.get("SHOP_BASE_URL")
    if not shop_base_url:
        raise ValueError("SHOP_BASE_URL is required")
    return Settings(
        shop_base_url=shop_base_url,
        poll_interval=float(os.environ.get("CHECKOUT_POLL_INTERVAL", "3")),
        timeout=float(os.environ.get("CHECKOUT_TIMEOUT", "180")),
    )
