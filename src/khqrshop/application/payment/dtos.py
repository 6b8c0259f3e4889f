"""Data Transfer Objects for the payment application layer."""

from __future__ import annotations

from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class GeneratePaymentRequestDTO(BaseModel):
    """DTO for requesting a KHQR code for a checkout."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {"amount": "12.50", "billNumber": "ORD-1717", "isMobile": False}
        },
    )

    # Range checks happen in the codec so they surface as InvalidAmountError.
    amount: Decimal
    bill_number: str = Field(..., alias="billNumber", min_length=1)
    is_mobile: bool = Field(False, alias="isMobile")


class GeneratePaymentResponseDTO(BaseModel):
    """DTO for returning a generated KHQR code."""

    model_config = ConfigDict(populate_by_name=True)

    qr_code: str = Field(..., alias="qrCode")
    md5: str
    deep_link: Optional[str] = Field(None, alias="deepLink")


class CheckPaymentRequestDTO(BaseModel):
    """DTO for asking whether a KHQR code has been paid."""

    md5: str = Field(..., min_length=32, max_length=32, pattern=r"^[0-9a-fA-F]+$")


class CheckPaymentResponseDTO(BaseModel):
    """DTO for returning the settlement status of a KHQR code."""

    status: Literal["PAID", "UNPAID"]
