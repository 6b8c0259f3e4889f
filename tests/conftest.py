"""Shared pytest fixtures for shop tests."""

from __future__ import annotations

import pytest

from khqrshop.application.order.dtos import CreateOrderDTO
from khqrshop.application.order.use_cases.order import OrderService
from khqrshop.application.payment.use_cases.payment import PaymentService
from khqrshop.codec.khqr import MerchantProfile
from tests.fixtures import FakePaymentSwitch, RecordingNotifier
from tests.fixtures.samples import ADMIN_CHAT_ID, TELEGRAM_INIT_DATA


@pytest.fixture
def merchant() -> MerchantProfile:
    """Merchant used by the reference payload vectors."""
    return MerchantProfile(account_id="shop@acledabank", display_name="Angkor Shop")


@pytest.fixture
def payment_switch() -> FakePaymentSwitch:
    return FakePaymentSwitch()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def payment_service(
    merchant: MerchantProfile, payment_switch: FakePaymentSwitch
) -> PaymentService:
    return PaymentService(
        merchant=merchant,
        payment_switch_factory=lambda: payment_switch,
        deeplink_callback="https://shop.example.com/thanks",
        app_metadata={"appName": "Angkor Shop"},
    )


@pytest.fixture
def order_service(notifier: RecordingNotifier) -> OrderService:
    return OrderService(
        notifier_factory=lambda: notifier,
        admin_chat_id=ADMIN_CHAT_ID,
        clock=lambda: 1717000000123,
    )


@pytest.fixture
def order_payload() -> dict:
    """Order body as the storefront posts it."""
    return {
        "customerInfo": {
            "name": "Sok Dara",
            "phone": "012345678",
            "address": "Wat Bo Road, Siem Reap",
        },
        "items": [
            {"name": "Palm sugar", "quantity": 2, "price": 3.5},
            {"name": "Kampot pepper", "quantity": 1, "price": 3},
        ],
        "total": 10,
        "deliveryMethod": "in_siem_reap",
        "paymentMethod": "khqr",
    }


@pytest.fixture
def order(order_payload: dict) -> CreateOrderDTO:
    return CreateOrderDTO.model_validate(order_payload)


@pytest.fixture
def telegram_order(order_payload: dict) -> CreateOrderDTO:
    return CreateOrderDTO.model_validate(
        {**order_payload, "telegramInitData": TELEGRAM_INIT_DATA}
    )
