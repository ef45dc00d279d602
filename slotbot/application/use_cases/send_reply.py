from __future__ import annotations

import logging
from typing import Callable

from slotbot.application.ports.message_platform import MessagePlatformPort
from slotbot.core.config import settings
from slotbot.domain.entities.outbound_message import (
    ButtonsMessage,
    ListMessage,
    OutboundMessage,
    TextMessage,
)


class SendReplyUseCase:
    def __init__(self, get_platform: Callable[[str], MessagePlatformPort]) -> None:
        self._get_platform = get_platform
        self._logger = logging.getLogger(__name__)

    def execute(self, platform: str, recipient_id: str, message: OutboundMessage) -> bool:
        """Send one structured message. Returns True if actually sent, False if skipped."""
        if not settings.AUTO_REPLY_ENABLED:
            self._logger.info(
                "WOULD_SEND_REPLY",
                extra={"customer_id": recipient_id, "reply_text": _preview(message)},
            )
            return False

        client = self._get_platform(platform)
        if isinstance(message, TextMessage):
            client.send_text(recipient_id=recipient_id, text=message.text)
        elif isinstance(message, ButtonsMessage):
            client.send_buttons(recipient_id=recipient_id, text=message.text, options=list(message.options))
        elif isinstance(message, ListMessage):
            client.send_list(
                recipient_id=recipient_id,
                text=message.text,
                title=message.title,
                button_label=message.button_label,
                rows=list(message.rows),
            )
        else:
            raise TypeError(f"Unsupported outbound message: {type(message).__name__}")
        return True


def _preview(message: OutboundMessage) -> str:
    if isinstance(message, ButtonsMessage):
        return f"{message.text} [{' | '.join(message.options)}]"
    if isinstance(message, ListMessage):
        return f"{message.text} [{' | '.join(row.title for row in message.rows)}]"
    return message.text
