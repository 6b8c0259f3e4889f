"""Telegram message formatting for placed orders."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
from urllib.parse import parse_qs

from .dtos import CreateOrderDTO

logger = logging.getLogger(__name__)

DELIVERY_METHODS = {
    "in_siem_reap": "In Siem Reap",
    "virak_buntham": "Virak Buntham",
    "j_and_t": "J&T Express",
}

PAYMENT_METHODS = {
    "cash_on_delivery": "Cash on Delivery",
    "aba_bank": "ABA Bank Transfer",
    "khqr": "Bakong KHQR",
}


@dataclass(frozen=True)
class TelegramUser:
    id: int
    username: str = "N/A"
    first_name: str = "Customer"


def format_delivery_method(method: str) -> str:
    return DELIVERY_METHODS.get(method, method)


def format_payment_method(method: str) -> str:
    return PAYMENT_METHODS.get(method, method)


def format_money(value: Decimal) -> str:
    return f"${value:.2f}"


def parse_telegram_user(init_data: Optional[str]) -> Optional[TelegramUser]:
    """Extract the buyer from Telegram WebApp init data.

    Init data is a URL-encoded query string whose ``user`` field holds JSON.
    Anything unparseable is logged and treated as an anonymous buyer.
    """
    if not init_data:
        return None
    try:
        raw_user = parse_qs(init_data).get("user")
        if not raw_user:
            return None
        user = json.loads(raw_user[0])
        return TelegramUser(
            id=int(user["id"]),
            username=user.get("username") or "N/A",
            first_name=user.get("first_name") or "Customer",
        )
    except (ValueError, KeyError, TypeError) as e:
        logger.warning("Could not parse Telegram init data: %s", e)
        return None


def _item_lines(order: CreateOrderDTO) -> str:
    return "\n".join(
        f"- {item.name} x {item.quantity} ({format_money(item.price)})"
        for item in order.items
    )


def build_admin_message(
    order_id: str, order: CreateOrderDTO, buyer: Optional[TelegramUser]
) -> str:
    info = order.customer_info
    lines = [
        "🚀 *New Order Received!* 🚀",
        "",
        f"*Order ID:* `{order_id}`",
        f"*Customer:* {info.name}",
        f"*Phone:* `{info.phone}`",
        f"*Address:* {info.address}",
    ]
    if buyer is not None:
        lines.append(f"*Telegram ID:* `{buyer.id}` (@{buyer.username})")
    lines += [
        f"*Delivery:* {format_delivery_method(order.delivery_method)}",
        f"*Payment:* {format_payment_method(order.payment_method)}",
        "",
        "*Items:*",
        _item_lines(order),
        "",
        f"*Total:* `{format_money(order.total)}`",
    ]
    return "\n".join(lines)


def build_customer_invoice(
    order_id: str, order: CreateOrderDTO, buyer: TelegramUser
) -> str:
    message = "\n".join(
        [
            "🧾 *Your Order Confirmation* 🧾",
            "",
            f"Hello {buyer.first_name}, your order (#`{order_id}`) is confirmed.",
            "",
            "*Summary:*",
            _item_lines(order),
            "",
            f"*Total:* `{format_money(order.total)}`",
            f"*Payment:* {format_payment_method(order.payment_method)}",
            f"*Delivery Address:* {order.customer_info.address}",
            "",
            "We will contact you shortly. Thank you!",
        ]
    )
    if order.payment_method == "aba_bank":
        message += (
            "\n\n*Important:* For ABA, please send a transaction screenshot "
            "to this chat."
        )
    return message
