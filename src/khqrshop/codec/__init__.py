"""KHQR payload codec."""

from .crc import crc16_ccitt_false, crc16_hex
from .khqr import (
    KhqrPayload,
    MerchantProfile,
    PaymentRequest,
    decode_payload,
    encode_payment,
    fingerprint,
    normalize_account_id,
    verify_checksum,
)
from .tlv import format_tag, parse_tlv

__all__ = [
    "KhqrPayload",
    "MerchantProfile",
    "PaymentRequest",
    "crc16_ccitt_false",
    "crc16_hex",
    "decode_payload",
    "encode_payment",
    "fingerprint",
    "format_tag",
    "normalize_account_id",
    "parse_tlv",
    "verify_checksum",
]
