"""Protocol interface for the chat notification sink."""

from __future__ import annotations

from typing import Callable, Optional, Protocol, Type, Union
from types import TracebackType


ChatId = Union[int, str]


class NotifierProtocol(Protocol):
    """Sends a text message to a chat recipient."""

    async def send_message(
        self, chat_id: ChatId, text: str, parse_mode: Optional[str] = "Markdown"
    ) -> None:
        """Deliver ``text`` to ``chat_id``.

        Raises:
            NotificationError: The message could not be delivered
        """
        ...

    async def aclose(self) -> None: ...

    async def __aenter__(self: "NotifierProtocol") -> "NotifierProtocol": ...

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None: ...


NotifierFactory = Callable[[], NotifierProtocol]
