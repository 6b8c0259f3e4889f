"""Use cases for KHQR payment generation and settlement checks."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from ....codec.khqr import MerchantProfile, PaymentRequest, encode_payment
from ....domain.errors import MissingCredentialsError
from ....domain.shared import PaymentSwitchClientFactory
from ..dtos import (
    CheckPaymentRequestDTO,
    CheckPaymentResponseDTO,
    GeneratePaymentRequestDTO,
    GeneratePaymentResponseDTO,
)

logger = logging.getLogger(__name__)


class PaymentService:
    """Service for building KHQR codes and checking their settlement."""

    def __init__(
        self,
        merchant: MerchantProfile,
        payment_switch_factory: PaymentSwitchClientFactory,
        *,
        deeplink_callback: Optional[str] = None,
        app_metadata: Optional[Mapping[str, Any]] = None,
    ):
        self.merchant = merchant
        self.payment_switch_factory = payment_switch_factory
        self.deeplink_callback = deeplink_callback
        self.app_metadata = dict(app_metadata or {})

    async def generate_payment(
        self, dto: GeneratePaymentRequestDTO
    ) -> GeneratePaymentResponseDTO:
        """Encode a KHQR payload and, for mobile payers, fetch a deep link."""
        payload = encode_payment(
            self.merchant,
            PaymentRequest(amount=dto.amount, bill_reference=dto.bill_number),
        )
        logger.info(
            "Generated KHQR for bill %s (md5 %s)", dto.bill_number, payload.fingerprint
        )

        deep_link: Optional[str] = None
        if dto.is_mobile:
            if not self.deeplink_callback:
                raise MissingCredentialsError(
                    "Deep link callback URL is not configured"
                )
            async with self.payment_switch_factory() as switch:
                deep_link = await switch.create_deep_link(
                    payload.payload_string, self.deeplink_callback, self.app_metadata
                )

        return GeneratePaymentResponseDTO(
            qr_code=payload.payload_string,
            md5=payload.fingerprint,
            deep_link=deep_link,
        )

    async def check_payment(
        self, dto: CheckPaymentRequestDTO
    ) -> CheckPaymentResponseDTO:
        """Ask the payment switch whether the code behind ``dto.md5`` was paid."""
        async with self.payment_switch_factory() as switch:
            settled = await switch.check_settled(dto.md5.lower())
        return CheckPaymentResponseDTO(status="PAID" if settled else "UNPAID")
