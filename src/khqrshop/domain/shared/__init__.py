"""Shared domain utilities.

This package is domain-accessible and should not depend on application code.
"""

from .bot_api_protocol import BotApiProtocol
from .notifier_protocol import ChatId, NotifierFactory, NotifierProtocol
from .payment_switch_protocol import (
    DeepLinkOracleProtocol,
    PaymentSwitchClientFactory,
    PaymentSwitchClientProtocol,
    SettlementOracleProtocol,
)

__all__ = [
    "BotApiProtocol",
    "ChatId",
    "DeepLinkOracleProtocol",
    "NotifierFactory",
    "NotifierProtocol",
    "PaymentSwitchClientFactory",
    "PaymentSwitchClientProtocol",
    "SettlementOracleProtocol",
]
