"""KHQR (Bakong) payload construction and verification.

A payload is the fixed sequence of EMVCo tags below followed by tag 63, the
CRC-16/CCITT-FALSE checksum of everything before it including the ``6304``
header itself:

    00 payload format    01 point of initiation    29 merchant account
    52 category code     53 currency               54 amount
    58 country           60 city                   62 additional data
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Final, Union

from ..domain.errors import (
    FieldTooLongError,
    InvalidAmountError,
    MalformedPayloadError,
    MissingCredentialsError,
)
from .crc import crc16_hex
from .tlv import format_tag, parse_tlv


PAYLOAD_FORMAT_INDICATOR: Final[str] = "01"
POINT_OF_INITIATION_DYNAMIC: Final[str] = "12"
BAKONG_GUID: Final[str] = "kh.com.nbc.bakong"
MERCHANT_CATEGORY_CODE: Final[str] = "5499"
CURRENCY_USD: Final[str] = "840"
COUNTRY_CODE: Final[str] = "KH"
DEFAULT_MERCHANT_CITY: Final[str] = "Siem Reap"
CRC_HEADER: Final[str] = "6304"

MAX_ACCOUNT_ID_LENGTH: Final[int] = 32
MAX_DISPLAY_NAME_LENGTH: Final[int] = 25
MAX_CITY_LENGTH: Final[int] = 15
MAX_BILL_REFERENCE_LENGTH: Final[int] = 25

# Deprecated bank aliases still found in merchant configuration.
LEGACY_ALIASES: Final[dict[str, str]] = {"aclb": "acledabank"}

_CENT: Final[Decimal] = Decimal("0.01")

AmountLike = Union[Decimal, int, float, str]


@dataclass(frozen=True)
class MerchantProfile:
    account_id: str
    display_name: str
    city: str = DEFAULT_MERCHANT_CITY


@dataclass(frozen=True)
class PaymentRequest:
    amount: AmountLike
    bill_reference: str


@dataclass(frozen=True)
class KhqrPayload:
    payload_string: str
    fingerprint: str


def normalize_account_id(account_id: str) -> str:
    """Rewrite a deprecated bank alias to its canonical form.

    >>> normalize_account_id("shop@aclb")
    'shop@acledabank'
    """
    account_id = account_id.strip()
    name, sep, alias = account_id.rpartition("@")
    if not sep:
        return account_id
    canonical = LEGACY_ALIASES.get(alias.lower())
    if canonical is None:
        return account_id
    return f"{name}@{canonical}"


def normalize_amount(amount: Any) -> Decimal:
    """Round to cents, rejecting anything that is not a positive finite number."""
    if isinstance(amount, bool):
        raise InvalidAmountError(f"Invalid payment amount: {amount!r}")
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError) as e:
        raise InvalidAmountError(f"Invalid payment amount: {amount!r}") from e
    if not value.is_finite():
        raise InvalidAmountError(f"Payment amount must be finite, got {amount!r}")
    try:
        value = value.quantize(_CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        # More digits than the decimal context can hold at cent precision.
        raise InvalidAmountError(f"Payment amount is too large: {amount!r}") from e
    if value <= 0:
        raise InvalidAmountError(f"Payment amount must be positive, got {amount!r}")
    return value


def format_amount(amount: Decimal) -> str:
    return f"{amount:.2f}"


def fingerprint(payload_string: str) -> str:
    """MD5 hex digest the payment switch uses to look up the transaction."""
    return hashlib.md5(payload_string.encode("utf-8")).hexdigest()


def _check_length(field: str, value: str, limit: int) -> None:
    if len(value) > limit:
        raise FieldTooLongError(field, len(value), limit)


def encode_payment(merchant: MerchantProfile, request: PaymentRequest) -> KhqrPayload:
    """Build the KHQR payload for one checkout attempt.

    All inputs are validated before any tag is encoded, so a failure never
    yields a partial payload.
    """
    if not merchant.account_id or not merchant.account_id.strip():
        raise MissingCredentialsError("Merchant account id is not configured")
    if not merchant.display_name or not merchant.display_name.strip():
        raise MissingCredentialsError("Merchant display name is not configured")

    amount = normalize_amount(request.amount)
    account_id = normalize_account_id(merchant.account_id)

    _check_length("account_id", account_id, MAX_ACCOUNT_ID_LENGTH)
    _check_length("display_name", merchant.display_name, MAX_DISPLAY_NAME_LENGTH)
    _check_length("city", merchant.city, MAX_CITY_LENGTH)
    _check_length("bill_reference", request.bill_reference, MAX_BILL_REFERENCE_LENGTH)

    merchant_account = (
        format_tag("00", BAKONG_GUID)
        + format_tag("01", account_id)
        + format_tag("02", merchant.display_name)
    )
    additional_data = format_tag("01", request.bill_reference)

    body = "".join(
        [
            format_tag("00", PAYLOAD_FORMAT_INDICATOR),
            format_tag("01", POINT_OF_INITIATION_DYNAMIC),
            format_tag("29", merchant_account),
            format_tag("52", MERCHANT_CATEGORY_CODE),
            format_tag("53", CURRENCY_USD),
            format_tag("54", format_amount(amount)),
            format_tag("58", COUNTRY_CODE),
            format_tag("60", merchant.city),
            format_tag("62", additional_data),
            CRC_HEADER,
        ]
    )
    payload_string = body + crc16_hex(body)
    return KhqrPayload(
        payload_string=payload_string, fingerprint=fingerprint(payload_string)
    )


def verify_checksum(payload_string: str) -> bool:
    """Whether the trailing tag 63 matches the checksum of the rest."""
    if len(payload_string) < len(CRC_HEADER) + 4:
        return False
    body, checksum = payload_string[:-4], payload_string[-4:]
    if not body.endswith(CRC_HEADER):
        return False
    return crc16_hex(body) == checksum.upper()


def decode_payload(payload_string: str) -> dict[str, Any]:
    """Parse a payload into its tags, expanding tags 29 and 62.

    Raises MalformedPayloadError when the checksum does not match.
    """
    if not verify_checksum(payload_string):
        raise MalformedPayloadError("KHQR checksum mismatch")
    fields: dict[str, Any] = dict(parse_tlv(payload_string))
    for nested in ("29", "62"):
        if nested in fields:
            fields[nested] = parse_tlv(fields[nested])
    return fields
