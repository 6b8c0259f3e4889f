"""Test fixtures for in-memory implementations."""

from .fake_payment_switch import FakePaymentSwitch
from .recording_notifier import RecordingNotifier

__all__ = [
    "FakePaymentSwitch",
    "RecordingNotifier",
]
