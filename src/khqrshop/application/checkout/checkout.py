"""Client-side checkout flow: show a KHQR code, wait for payment, place the order."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Protocol

from ...domain.errors import KhqrShopError
from ...domain.payment.entities import ConfirmationState
from ..order.dtos import CreateOrderDTO, OrderResponseDTO
from ..payment.dtos import GeneratePaymentRequestDTO, GeneratePaymentResponseDTO
from .watcher import DEFAULT_POLL_INTERVAL, DEFAULT_TIMEOUT, PaymentConfirmationWatcher

logger = logging.getLogger(__name__)

CASH_ON_DELIVERY = "cash_on_delivery"

OnDisplay = Callable[[GeneratePaymentResponseDTO], Awaitable[None]]


class ShopApiProtocol(Protocol):
    """The slice of the shop API a checkout needs."""

    async def generate_payment(
        self, dto: GeneratePaymentRequestDTO
    ) -> GeneratePaymentResponseDTO: ...

    async def create_order(self, dto: CreateOrderDTO) -> OrderResponseDTO: ...

    async def check_settled(self, fingerprint: str) -> bool: ...


@dataclass
class CheckoutResult:
    """Outcome of one checkout attempt.

    ``state`` is the payment confirmation state; it stays ``None`` when no
    KHQR payment was watched (cash on delivery, or the code was never issued).
    """

    state: Optional[ConfirmationState] = None
    payment: Optional[GeneratePaymentResponseDTO] = None
    order: Optional[OrderResponseDTO] = None
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.order is not None


def new_bill_number() -> str:
    return f"ORD-{int(time.time() * 1000)}"


class CheckoutService:
    """Runs one checkout attempt against the shop API."""

    def __init__(
        self,
        shop: ShopApiProtocol,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.shop = shop
        self.poll_interval = poll_interval
        self.timeout = timeout

    async def pay_cash_on_delivery(self, order: CreateOrderDTO) -> CheckoutResult:
        """Place the order straight away; nothing to wait for.

        The payer settles on delivery, so the result carries no payment state.
        """
        if order.payment_method != CASH_ON_DELIVERY:
            order = order.model_copy(update={"payment_method": CASH_ON_DELIVERY})
        try:
            placed = await self.shop.create_order(order)
        except KhqrShopError as e:
            logger.error("Could not place cash on delivery order: %s", e)
            return CheckoutResult(error=e)
        return CheckoutResult(order=placed)

    async def pay_with_khqr(
        self,
        order: CreateOrderDTO,
        *,
        bill_number: Optional[str] = None,
        is_mobile: bool = False,
        on_display: Optional[OnDisplay] = None,
    ) -> CheckoutResult:
        """Show a KHQR code and place the order once the payment settles.

        ``on_display`` receives the code (and deep link for mobile payers) to
        present it to the payer. The order is placed at most once.
        """
        try:
            payment = await self.shop.generate_payment(
                GeneratePaymentRequestDTO(
                    amount=order.total,
                    bill_number=bill_number or new_bill_number(),
                    is_mobile=is_mobile,
                )
            )
        except KhqrShopError as e:
            logger.error("Could not generate KHQR code: %s", e)
            return CheckoutResult(error=e)
        if on_display is not None:
            await on_display(payment)

        result = CheckoutResult(state=ConfirmationState.PENDING, payment=payment)

        async def finalize(fingerprint: str) -> None:
            result.order = await self.shop.create_order(order)
            logger.info(
                "Order %s placed for payment %s", result.order.order_id, fingerprint
            )

        watcher = PaymentConfirmationWatcher(
            self.shop,
            finalize,
            poll_interval=self.poll_interval,
            timeout=self.timeout,
        )
        handle = watcher.start(payment.md5)
        try:
            result.state = await handle.wait()
        finally:
            # Leaving early (e.g. the caller was cancelled) must stop polling.
            handle.cancel()
        result.error = handle.finalize_error
        return result
