"""Use cases for placing storefront orders."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from ....domain.errors import MissingCredentialsError
from ....domain.shared import ChatId, NotifierFactory
from ..dtos import CreateOrderDTO, OrderResponseDTO
from ..messages import build_admin_message, build_customer_invoice, parse_telegram_user

logger = logging.getLogger(__name__)


def _epoch_millis() -> int:
    return int(time.time() * 1000)


class OrderService:
    """Service that records an order by announcing it to the shop operator."""

    def __init__(
        self,
        notifier_factory: NotifierFactory,
        admin_chat_id: Optional[ChatId],
        *,
        clock: Callable[[], int] = _epoch_millis,
    ):
        self.notifier_factory = notifier_factory
        self.admin_chat_id = admin_chat_id
        self.clock = clock

    def new_order_id(self) -> str:
        return f"ORD-{self.clock()}"

    async def create_order(self, dto: CreateOrderDTO) -> OrderResponseDTO:
        """Notify the operator and, when known, the buyer about a new order."""
        if not self.admin_chat_id:
            raise MissingCredentialsError("Telegram admin chat id is not configured")

        order_id = self.new_order_id()
        buyer = parse_telegram_user(dto.telegram_init_data)

        async with self.notifier_factory() as notifier:
            await notifier.send_message(
                self.admin_chat_id, build_admin_message(order_id, dto, buyer)
            )
            if buyer is not None:
                await notifier.send_message(
                    buyer.id, build_customer_invoice(order_id, dto, buyer)
                )

        logger.info(
            "Order %s placed (%s, %d item(s))",
            order_id,
            dto.payment_method,
            len(dto.items),
        )
        return OrderResponseDTO(message="Order received!", order_id=order_id)
