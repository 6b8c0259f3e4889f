"""Protocol interfaces for the national payment switch.

These protocols define the contract the payment use cases and the checkout
watcher rely on. They enable dependency injection and make services testable
by allowing in-memory implementations.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional, Protocol, Type
from types import TracebackType


class SettlementOracleProtocol(Protocol):
    """Answers whether the transaction behind a KHQR fingerprint has settled.

    Implementations must be cheap to call repeatedly. A ``False`` answer is not
    final: the switch is eventually consistent.
    """

    async def check_settled(self, fingerprint: str) -> bool:
        """Check settlement for a payload fingerprint.

        Args:
            fingerprint: MD5 hex digest of the displayed KHQR payload

        Returns:
            True once a matching transaction has settled

        Raises:
            OracleUnavailableError: The switch could not be reached
            MalformedOracleResponseError: The switch answered with an unexpected body
        """
        ...


class DeepLinkOracleProtocol(Protocol):
    """Turns a KHQR payload into a deep link that opens a mobile banking app."""

    async def create_deep_link(
        self,
        payload: str,
        callback_url: str,
        app_metadata: Mapping[str, Any],
    ) -> str:
        """Create a deep link for a payload.

        Args:
            payload: Full KHQR payload string
            callback_url: Where the banking app returns the payer after paying
            app_metadata: App name and icon shown by the banking app

        Returns:
            Short deep link URL

        Raises:
            DeepLinkError: The switch refused the request
            OracleUnavailableError: The switch could not be reached
        """
        ...


class PaymentSwitchClientProtocol(
    SettlementOracleProtocol, DeepLinkOracleProtocol, Protocol
):
    """Both oracles behind a single closable client."""

    async def aclose(self) -> None: ...

    async def __aenter__(
        self: "PaymentSwitchClientProtocol",
    ) -> "PaymentSwitchClientProtocol": ...

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None: ...


# Factory type for creating payment switch clients per request
PaymentSwitchClientFactory = Callable[[], PaymentSwitchClientProtocol]
