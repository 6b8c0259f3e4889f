"""Order API routes."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from prometheus_client import Counter

from ...application.order.dtos import CreateOrderDTO, OrderResponseDTO
from ...application.order.messages import PAYMENT_METHODS
from ...application.order.use_cases.order import OrderService
from ...domain.errors import MissingCredentialsError, NotificationError
from ..dependencies import get_order_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])

orders_total = Counter(
    "orders_total",
    "Total orders placed",
    ["payment_method", "status"],
)


def _method_label(order: CreateOrderDTO) -> str:
    return order.payment_method if order.payment_method in PAYMENT_METHODS else "other"


@router.post("", response_model=OrderResponseDTO)
async def create_order(
    order_data: CreateOrderDTO,
    order_service: OrderService = Depends(get_order_service),
) -> OrderResponseDTO:
    """Place an order and notify the shop operator over Telegram."""
    method = _method_label(order_data)
    try:
        result = await order_service.create_order(order_data)
    except MissingCredentialsError:
        orders_total.labels(payment_method=method, status="error").inc()
        logger.error("Telegram environment variables are not set")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Configuration Error.",
        )
    except NotificationError as e:
        orders_total.labels(payment_method=method, status="error").inc()
        logger.exception("Failed to process order")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to process order: {e}",
        )
    orders_total.labels(payment_method=method, status="success").inc()
    return result
