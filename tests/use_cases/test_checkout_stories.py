"""Checkout stories run against the real API app over an in-process transport."""

from __future__ import annotations

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from khqrshop.api.app import create_app
from khqrshop.api.dependencies import (
    get_cached_settings,
    get_notifier_factory,
    get_payment_switch_factory,
)
from khqrshop.application.checkout.checkout import CheckoutService
from khqrshop.application.order.dtos import CreateOrderDTO
from khqrshop.domain.errors import ShopApiError
from khqrshop.domain.payment.entities import ConfirmationState
from khqrshop.envs.shop_env import Settings
from khqrshop.infrastructure.shop.shop_client_async import ShopClientAsync
from tests.fixtures import FakePaymentSwitch, RecordingNotifier
from tests.fixtures.samples import ADMIN_CHAT_ID, REFERENCE_MD5, REFERENCE_PAYLOAD

INTERVAL = 0.01


@pytest.fixture
def shop_settings() -> Settings:
    return Settings(
        bakong_merchant_id="shop@aclb",
        bakong_merchant_name="Angkor Shop",
        bakong_deeplink_callback="https://shop.example.com/thanks",
        bakong_app_name="Angkor Shop",
        telegram_admin_chat_id=ADMIN_CHAT_ID,
    )


@pytest.fixture
def shop_app(
    shop_settings: Settings,
    payment_switch: FakePaymentSwitch,
    notifier: RecordingNotifier,
) -> FastAPI:
    app = create_app()
    app.dependency_overrides[get_cached_settings] = lambda: shop_settings
    app.dependency_overrides[get_payment_switch_factory] = lambda: (
        lambda: payment_switch
    )
    app.dependency_overrides[get_notifier_factory] = lambda: lambda: notifier
    return app


def shop_client(app: FastAPI) -> ShopClientAsync:
    return ShopClientAsync(
        "http://shop.test/api/v1", transport=httpx.ASGITransport(app=app)
    )


class TestCheckoutStories:
    @pytest.mark.asyncio
    async def test_buyer_pays_khqr_and_order_is_announced(
        self,
        shop_app: FastAPI,
        payment_switch: FakePaymentSwitch,
        notifier: RecordingNotifier,
        telegram_order: CreateOrderDTO,
    ) -> None:
        payment_switch.enqueue(False, False, True)

        async with shop_client(shop_app) as shop:
            service = CheckoutService(shop, poll_interval=INTERVAL, timeout=5)
            result = await service.pay_with_khqr(telegram_order, bill_number="ORD-1")

        assert result.state == ConfirmationState.PAID
        assert result.succeeded
        # The legacy merchant alias is encoded under its canonical name.
        assert result.payment is not None
        assert result.payment.qr_code == REFERENCE_PAYLOAD
        assert result.payment.md5 == REFERENCE_MD5
        assert payment_switch.check_count == 3
        assert len(notifier.messages_to(ADMIN_CHAT_ID)) == 1
        assert len(notifier.messages_to(42)) == 1

    @pytest.mark.asyncio
    async def test_mobile_buyer_gets_deep_link(
        self,
        shop_app: FastAPI,
        payment_switch: FakePaymentSwitch,
        order: CreateOrderDTO,
    ) -> None:
        payment_switch.enqueue(True)

        async with shop_client(shop_app) as shop:
            service = CheckoutService(shop, poll_interval=INTERVAL, timeout=5)
            result = await service.pay_with_khqr(
                order, bill_number="ORD-1", is_mobile=True
            )

        assert result.payment is not None
        assert result.payment.deep_link == "https://bakong.page.link/fake"
        deep_link_calls = [
            c for c in payment_switch.calls if c[0] == "create_deep_link"
        ]
        assert deep_link_calls[0][1]["app_metadata"] == {"appName": "Angkor Shop"}
        assert result.succeeded

    @pytest.mark.asyncio
    async def test_unpaid_code_times_out_without_order(
        self,
        shop_app: FastAPI,
        notifier: RecordingNotifier,
        order: CreateOrderDTO,
    ) -> None:
        async with shop_client(shop_app) as shop:
            service = CheckoutService(
                shop, poll_interval=INTERVAL, timeout=INTERVAL * 5
            )
            result = await service.pay_with_khqr(order, bill_number="ORD-1")

        assert result.state == ConfirmationState.TIMED_OUT
        assert notifier.messages == []

    @pytest.mark.asyncio
    async def test_cash_on_delivery_skips_payment(
        self,
        shop_app: FastAPI,
        payment_switch: FakePaymentSwitch,
        notifier: RecordingNotifier,
        order: CreateOrderDTO,
    ) -> None:
        async with shop_client(shop_app) as shop:
            result = await CheckoutService(shop).pay_cash_on_delivery(order)

        assert result.succeeded
        assert result.state is None
        assert payment_switch.calls == []
        assert "*Payment:* Cash on Delivery" in notifier.messages_to(ADMIN_CHAT_ID)[0]

    @pytest.mark.asyncio
    async def test_zero_total_is_refused_before_display(
        self,
        shop_app: FastAPI,
        payment_switch: FakePaymentSwitch,
        order_payload: dict,
    ) -> None:
        order = CreateOrderDTO.model_validate({**order_payload, "total": 0})

        async with shop_client(shop_app) as shop:
            result = await CheckoutService(shop).pay_with_khqr(order, bill_number="B")

        assert not result.succeeded
        assert result.state is None
        assert isinstance(result.error, ShopApiError)
        assert result.error.status_code == 400
        assert payment_switch.calls == []


class TestServiceEndpoints:
    def test_health(self, shop_app: FastAPI) -> None:
        response = TestClient(shop_app).get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_metrics_exposed(self, shop_app: FastAPI) -> None:
        client = TestClient(shop_app)
        client.post("/api/v1/payments/generate", json={"amount": 0, "billNumber": "B"})

        response = client.get("/metrics/")

        assert response.status_code == 200
        assert "khqr_generated_total" in response.text
