"""Unit tests for the order service."""

from __future__ import annotations

import pytest

from khqrshop.application.order.dtos import CreateOrderDTO
from khqrshop.application.order.use_cases.order import OrderService
from khqrshop.domain.errors import MissingCredentialsError, NotificationError
from tests.fixtures import RecordingNotifier
from tests.fixtures.samples import ADMIN_CHAT_ID


class TestCreateOrder:
    @pytest.mark.asyncio
    async def test_notifies_admin(
        self,
        order_service: OrderService,
        notifier: RecordingNotifier,
        order: CreateOrderDTO,
    ) -> None:
        result = await order_service.create_order(order)

        assert result.message == "Order received!"
        assert result.order_id == "ORD-1717000000123"
        assert len(notifier.messages) == 1
        chat_id, text, parse_mode = notifier.messages[0]
        assert chat_id == ADMIN_CHAT_ID
        assert parse_mode == "Markdown"
        assert "`ORD-1717000000123`" in text
        assert notifier.closed

    @pytest.mark.asyncio
    async def test_sends_invoice_to_telegram_buyer(
        self,
        order_service: OrderService,
        notifier: RecordingNotifier,
        telegram_order: CreateOrderDTO,
    ) -> None:
        await order_service.create_order(telegram_order)

        assert len(notifier.messages_to(ADMIN_CHAT_ID)) == 1
        assert "(@dara)" in notifier.messages_to(ADMIN_CHAT_ID)[0]
        invoices = notifier.messages_to(42)
        assert len(invoices) == 1
        assert invoices[0].startswith("🧾 *Your Order Confirmation* 🧾")

    @pytest.mark.asyncio
    async def test_unparseable_init_data_skips_invoice(
        self,
        order_service: OrderService,
        notifier: RecordingNotifier,
        order_payload: dict,
    ) -> None:
        order = CreateOrderDTO.model_validate(
            {**order_payload, "telegramInitData": "user=%7Bbroken"}
        )

        await order_service.create_order(order)

        assert [chat_id for chat_id, _, _ in notifier.messages] == [ADMIN_CHAT_ID]

    @pytest.mark.asyncio
    async def test_missing_admin_chat(
        self, notifier: RecordingNotifier, order: CreateOrderDTO
    ) -> None:
        service = OrderService(lambda: notifier, admin_chat_id=None)

        with pytest.raises(MissingCredentialsError):
            await service.create_order(order)
        assert notifier.messages == []

    @pytest.mark.asyncio
    async def test_notification_failure_propagates(
        self, order: CreateOrderDTO
    ) -> None:
        notifier = RecordingNotifier(fail_with=NotificationError("bot blocked"))
        service = OrderService(lambda: notifier, admin_chat_id=ADMIN_CHAT_ID)

        with pytest.raises(NotificationError, match="bot blocked"):
            await service.create_order(order)
        assert notifier.closed

    def test_order_id_uses_clock(self, order_service: OrderService) -> None:
        assert order_service.new_order_id() == "ORD-1717000000123"
