"""Domain-specific exceptions."""

from __future__ import annotations

from typing import Optional


class KhqrShopError(Exception):
    """Base class for all storefront errors."""


class InvalidAmountError(KhqrShopError):
    """Raised when a payment amount is non-positive or non-finite."""


class MissingCredentialsError(KhqrShopError):
    """Raised when merchant or bot credentials are not configured."""


class FieldTooLongError(KhqrShopError):
    """Raised when a field does not fit its KHQR length limit."""

    def __init__(self, field: str, length: int, limit: int) -> None:
        super().__init__(
            f"{field} is {length} characters long, maximum allowed is {limit}"
        )
        self.field = field
        self.length = length
        self.limit = limit


class MalformedPayloadError(KhqrShopError):
    """Raised when a KHQR payload cannot be parsed as tag/length/value data."""


class OracleUnavailableError(KhqrShopError):
    """Raised when the payment switch cannot be reached or answers with an error."""


class MalformedOracleResponseError(KhqrShopError):
    """Raised when the payment switch answers with an unexpected body."""


class DeepLinkError(KhqrShopError):
    """Raised when the payment switch refuses to create a mobile deep link."""


class NotificationError(KhqrShopError):
    """Raised when a chat message could not be delivered."""


class ShopApiError(KhqrShopError):
    """Raised when the shop API cannot be reached or rejects a checkout call."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
