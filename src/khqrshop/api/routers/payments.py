"""KHQR payment API routes."""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends, HTTPException, status
from prometheus_client import Counter, Histogram

from ...application.payment.dtos import (
    CheckPaymentRequestDTO,
    CheckPaymentResponseDTO,
    GeneratePaymentRequestDTO,
    GeneratePaymentResponseDTO,
)
from ...application.payment.use_cases.payment import PaymentService
from ...domain.errors import (
    DeepLinkError,
    FieldTooLongError,
    InvalidAmountError,
    MalformedOracleResponseError,
    MissingCredentialsError,
    OracleUnavailableError,
)
from ..dependencies import get_payment_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["payments"])


khqr_generated_total = Counter(
    "khqr_generated_total",
    "Total KHQR generation requests processed",
    ["status"],
)

payment_checks_total = Counter(
    "payment_checks_total",
    "Total settlement checks processed",
    ["result"],
)

payment_check_duration_seconds = Histogram(
    "payment_check_duration_seconds",
    "Wall time to answer a settlement check",
    ["result"],
)


@router.post("/generate", response_model=GeneratePaymentResponseDTO)
async def generate_payment(
    payment_data: GeneratePaymentRequestDTO,
    payment_service: PaymentService = Depends(get_payment_service),
) -> GeneratePaymentResponseDTO:
    """Build a KHQR code for a checkout; mobile payers also get a deep link."""
    try:
        result = await payment_service.generate_payment(payment_data)
    except (InvalidAmountError, FieldTooLongError) as e:
        khqr_generated_total.labels(status="client_error").inc()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except MissingCredentialsError:
        khqr_generated_total.labels(status="server_error").inc()
        logger.error("Bakong credentials are not configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Bakong API credentials are not configured on the server.",
        )
    except (DeepLinkError, OracleUnavailableError, MalformedOracleResponseError) as e:
        khqr_generated_total.labels(status="upstream_error").inc()
        logger.warning("Bakong deep-link request failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Error communicating with Bakong API: {e}",
        )
    khqr_generated_total.labels(status="success").inc()
    return result


@router.post("/check", response_model=CheckPaymentResponseDTO)
async def check_payment(
    check_data: CheckPaymentRequestDTO,
    payment_service: PaymentService = Depends(get_payment_service),
) -> CheckPaymentResponseDTO:
    """Report whether the KHQR code with this MD5 has been paid."""
    start_time = time.perf_counter()
    result_label = "error"
    try:
        result = await payment_service.check_payment(check_data)
        result_label = result.status.lower()
        return result
    except MissingCredentialsError:
        logger.error("Bakong API token is not configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Bakong API token is not configured.",
        )
    except MalformedOracleResponseError as e:
        logger.warning("Malformed Bakong response: %s", e)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to check payment status.",
        )
    except OracleUnavailableError as e:
        logger.warning("Bakong unavailable: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Failed to check payment status.",
        )
    finally:
        elapsed = time.perf_counter() - start_time
        payment_checks_total.labels(result=result_label).inc()
        payment_check_duration_seconds.labels(result=result_label).observe(elapsed)
