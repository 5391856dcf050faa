from __future__ import annotations

import logging
from typing import Callable, List

from .transport import ChatMessage, HintMessage, ItemRecvMessage, ItemSendMessage, TextMessage

logger = logging.getLogger(__name__)

# Engine text colour escapes
COLOR_NORMAL = "~2"
COLOR_LOCATION = "~3"
COLOR_PLAYER = "~4"
COLOR_ITEM = "~9"


def format_message(msg: TextMessage) -> str:
    """Render a server text message with the engine's colour escapes."""
    if isinstance(msg, ItemSendMessage):
        return f"{COLOR_ITEM}{msg.item}{COLOR_NORMAL} was sent to {COLOR_PLAYER}{msg.recv_player}"
    if isinstance(msg, ItemRecvMessage):
        return f"{COLOR_NORMAL}Received {COLOR_ITEM}{msg.item}{COLOR_NORMAL} from {COLOR_PLAYER}{msg.send_player}"
    if isinstance(msg, HintMessage):
        status = " (Checked)" if msg.checked else " (Unchecked)"
        return (
            f"{COLOR_ITEM}{msg.item}{COLOR_NORMAL} from {COLOR_PLAYER}{msg.send_player}"
            f"{COLOR_NORMAL} to {COLOR_PLAYER}{msg.recv_player}{COLOR_NORMAL} at "
            f"{COLOR_LOCATION}{msg.location}{status}"
        )
    if isinstance(msg, ChatMessage):
        return f"{COLOR_NORMAL}{msg.text}"
    raise TypeError(f"Not a text message: {msg!r}")


def plain_text(msg: TextMessage) -> str:
    """Uncoloured text of a message, for the log."""
    if msg.text:
        return msg.text
    return format_message(msg).replace(COLOR_ITEM, "").replace(COLOR_NORMAL, "").replace(
        COLOR_PLAYER, ""
    ).replace(COLOR_LOCATION, "")


class MessageBuffer:
    """Holds display strings until the session is initialized.

    Messages arriving before that are kept in order and handed to the display
    collaborator on the first flush after initialization.
    """

    def __init__(self, display: Callable[[str], None]) -> None:
        self._display = display
        self._pending: List[str] = []
        self.ready = False

    def post(self, text: str) -> None:
        if self.ready:
            self._display(text)
        else:
            self._pending.append(text)

    def flush(self) -> int:
        """Display every buffered message if ready. Returns how many were shown."""
        if not self.ready or not self._pending:
            return 0
        items = list(self._pending)
        self._pending.clear()
        for text in items:
            self._display(text)
        return len(items)

    @property
    def has_pending(self) -> bool:
        return bool(self._pending)
