from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path

from .application.checkout.checkout import (
    CASH_ON_DELIVERY,
    CheckoutResult,
    CheckoutService,
)
from .application.order.dtos import CreateOrderDTO
from .application.payment.dtos import GeneratePaymentResponseDTO
from .domain.payment.entities import ConfirmationState
from .envs.checkout_env import get_settings
from .infrastructure.shop.shop_client_async import ShopClientAsync


async def _display(payment: GeneratePaymentResponseDTO) -> None:
    print("Scan this KHQR with any Bakong-enabled banking app:")
    print(payment.qr_code)
    if payment.deep_link:
        print(f"Or open: {payment.deep_link}")
    print(f"Waiting for payment {payment.md5} ...")


async def run_checkout(
    order: CreateOrderDTO, *, is_mobile: bool = False
) -> CheckoutResult:
    settings = get_settings()
    async with ShopClientAsync(settings.shop_base_url) as shop:
        service = CheckoutService(
            shop, poll_interval=settings.poll_interval, timeout=settings.timeout
        )
        if order.payment_method == CASH_ON_DELIVERY:
            return await service.pay_cash_on_delivery(order)
        return await service.pay_with_khqr(
            order, is_mobile=is_mobile, on_display=_display
        )


def summarize(result: CheckoutResult) -> str:
    """One-line outcome of a checkout attempt for the console."""
    if result.succeeded:
        if result.state is None:
            return f"Order {result.order.order_id} placed (cash on delivery)."
        return f"Order {result.order.order_id} placed ({result.state.value})."
    if result.state == ConfirmationState.PAID:
        return f"Payment received but the order could not be placed: {result.error}"
    if result.error is not None:
        return f"Could not complete checkout: {result.error}"
    return f"Could not complete payment: {result.state.value}."


def main() -> None:
    """Run one checkout for the order described by a JSON file.

    Usage: khqrshop-checkout ORDER.json [--mobile]
    """
    logging.basicConfig(level=logging.INFO)
    args = sys.argv[1:]
    if not args:
        raise SystemExit("usage: khqrshop-checkout ORDER.json [--mobile]")

    order = CreateOrderDTO.model_validate(json.loads(Path(args[0]).read_text()))
    result = asyncio.run(run_checkout(order, is_mobile="--mobile" in args[1:]))

    print(summarize(result))
    if not result.succeeded:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
