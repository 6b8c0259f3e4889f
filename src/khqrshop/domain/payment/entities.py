"""Payment domain entities."""

from __future__ import annotations

from enum import Enum


class ConfirmationState(str, Enum):
    """Lifecycle of a displayed KHQR code waiting for settlement."""

    PENDING = "PENDING"
    PAID = "PAID"
    CANCELLED = "CANCELLED"
    TIMED_OUT = "TIMED_OUT"

    @property
    def is_terminal(self) -> bool:
        return self is not ConfirmationState.PENDING
