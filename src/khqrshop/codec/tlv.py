"""EMVCo tag/length/value helpers.

Every field is ``ID (2 digits) + LENGTH (2 digits) + VALUE`` where LENGTH is
the character count of VALUE. Composite fields nest further TLV strings inside
their VALUE.
"""

from __future__ import annotations

from typing import Final

from ..domain.errors import FieldTooLongError, MalformedPayloadError


MAX_VALUE_LENGTH: Final[int] = 99
HEADER_LENGTH: Final[int] = 4


def format_tag(tag_id: str, value: str) -> str:
    """Encode one field. Raises FieldTooLongError past the two-digit length."""
    if len(tag_id) != 2 or not tag_id.isdigit():
        raise ValueError(f"Tag id must be two digits, got {tag_id!r}")
    if len(value) > MAX_VALUE_LENGTH:
        raise FieldTooLongError(f"tag {tag_id}", len(value), MAX_VALUE_LENGTH)
    return f"{tag_id}{len(value):02d}{value}"


def parse_tlv(text: str) -> dict[str, str]:
    """Split a TLV string into an ordered ``{tag: value}`` mapping.

    A repeated tag keeps its last value.
    """
    fields: dict[str, str] = {}
    pos = 0
    while pos < len(text):
        header = text[pos : pos + HEADER_LENGTH]
        if len(header) < HEADER_LENGTH or not header.isdigit():
            raise MalformedPayloadError(f"Invalid TLV header at offset {pos}")
        tag_id, length = header[:2], int(header[2:])
        start = pos + HEADER_LENGTH
        end = start + length
        if end > len(text):
            raise MalformedPayloadError(
                f"Tag {tag_id} declares {length} characters, "
                f"only {len(text) - start} remain"
            )
        fields[tag_id] = text[start:end]
        pos = end
    return fields
