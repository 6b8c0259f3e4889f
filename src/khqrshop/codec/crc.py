from __future__ import annotations

from typing import Final


CRC16_POLY: Final[int] = 0x1021
CRC16_INIT: Final[int] = 0xFFFF


def crc16_ccitt_false(data: bytes) -> int:
    """CRC-16/CCITT-FALSE: poly 0x1021, init 0xFFFF, no reflection, no final XOR.

    Check value: crc16_ccitt_false(b"123456789") == 0x29B1
    """
    crc = CRC16_INIT
    for byte in data:
        crc = (crc ^ (byte << 8)) & 0xFFFF
        for _ in range(8):
            if crc & 0x8000:
                crc = ((crc << 1) ^ CRC16_POLY) & 0xFFFF
            else:
                crc = (crc << 1) & 0xFFFF
    return crc


def crc16_hex(text: str) -> str:
    """Checksum of the UTF-8 bytes of ``text`` as 4 upper-case hex digits."""
    return f"{crc16_ccitt_false(text.encode('utf-8')):04X}"
