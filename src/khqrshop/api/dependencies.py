"""FastAPI dependencies for the shop API."""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from ..application.order.use_cases.order import OrderService
from ..application.payment.use_cases.payment import PaymentService
from ..domain.shared import (
    NotifierFactory,
    NotifierProtocol,
    PaymentSwitchClientFactory,
    PaymentSwitchClientProtocol,
)
from ..envs.shop_env import Settings, get_settings
from ..infrastructure.bakong.bakong_client import AsyncBakongClient
from ..infrastructure.telegram.telegram_client import AsyncTelegramClient


@lru_cache
def get_cached_settings() -> Settings:
    """Settings are read from the environment once per process."""
    return get_settings()


def get_payment_switch_factory(
    settings: Settings = Depends(get_cached_settings),
) -> PaymentSwitchClientFactory:
    """Get a factory for Bakong clients; a missing token fails on first use."""

    def factory() -> PaymentSwitchClientProtocol:
        return AsyncBakongClient(settings.bakong_base_url, settings.bakong_api_token)

    return factory


def get_notifier_factory(
    settings: Settings = Depends(get_cached_settings),
) -> NotifierFactory:
    """Get a factory for Telegram clients; a missing token fails on first use."""

    def factory() -> NotifierProtocol:
        return AsyncTelegramClient(
            settings.telegram_bot_token, settings.telegram_api_base_url
        )

    return factory


def get_payment_service(
    settings: Settings = Depends(get_cached_settings),
    payment_switch_factory: PaymentSwitchClientFactory = Depends(
        get_payment_switch_factory
    ),
) -> PaymentService:
    """Get payment service."""
    app_metadata = {"appName": settings.bakong_app_name}
    if settings.bakong_app_icon_url:
        app_metadata["appIconUrl"] = settings.bakong_app_icon_url
    return PaymentService(
        merchant=settings.merchant_profile(),
        payment_switch_factory=payment_switch_factory,
        deeplink_callback=settings.bakong_deeplink_callback,
        app_metadata=app_metadata,
    )


def get_order_service(
    settings: Settings = Depends(get_cached_settings),
    notifier_factory: NotifierFactory = Depends(get_notifier_factory),
) -> OrderService:
    """Get order service."""
    return OrderService(
        notifier_factory=notifier_factory,
        admin_chat_id=settings.telegram_admin_chat_id,
    )
