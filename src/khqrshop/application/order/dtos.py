"""Data Transfer Objects for the order application layer."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CustomerInfoDTO(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=1, max_length=30)
    address: str = Field(..., min_length=1, max_length=300)


class OrderItemDTO(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    quantity: int = Field(..., gt=0)
    price: Decimal = Field(..., ge=0)


class CreateOrderDTO(BaseModel):
    """DTO for placing an order from the storefront."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "customerInfo": {
                    "name": "Sok Dara",
                    "phone": "012345678",
                    "address": "Wat Bo Road, Siem Reap",
                },
                "items": [{"name": "Palm sugar", "quantity": 2, "price": 3.5}],
                "total": 7.0,
                "deliveryMethod": "in_siem_reap",
                "paymentMethod": "khqr",
            }
        },
    )

    customer_info: CustomerInfoDTO = Field(..., alias="customerInfo")
    items: list[OrderItemDTO] = Field(..., min_length=1)
    total: Decimal = Field(..., ge=0)
    delivery_method: str = Field(..., alias="deliveryMethod")
    payment_method: str = Field(..., alias="paymentMethod")
    telegram_init_data: Optional[str] = Field(None, alias="telegramInitData")


class OrderResponseDTO(BaseModel):
    """DTO for acknowledging a placed order."""

    model_config = ConfigDict(populate_by_name=True)

    message: str
    order_id: str = Field(..., alias="orderId")
