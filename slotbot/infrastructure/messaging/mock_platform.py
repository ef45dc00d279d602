from __future__ import annotations

import logging

from slotbot.application.ports.message_platform import MessagePlatformPort
from slotbot.domain.entities.outbound_message import ListRow


class MockPlatform(MessagePlatformPort):
    """Logs outbound messages instead of calling a provider. Keeps them for inspection."""

    def __init__(self, name: str = "mock") -> None:
        self.name = name
        self.sent: list[dict] = []
        self._logger = logging.getLogger(__name__)

    def send_text(self, recipient_id: str, text: str) -> None:
        self._record(recipient_id, {"type": "text", "text": text})

    def send_buttons(self, recipient_id: str, text: str, options: list[str]) -> None:
        self._record(recipient_id, {"type": "buttons", "text": text, "options": list(options)})

    def send_list(
        self,
        recipient_id: str,
        text: str,
        title: str,
        button_label: str,
        rows: list[ListRow],
    ) -> None:
        self._record(
            recipient_id,
            {
                "type": "list",
                "text": text,
                "title": title,
                "button_label": button_label,
                "rows": [row.title for row in rows],
            },
        )

    def _record(self, recipient_id: str, payload: dict) -> None:
        self.sent.append({"recipient_id": recipient_id, **payload})
        self._logger.info(
            "Mock send",
            extra={"customer_id": recipient_id, "reply_text": payload.get("text"), "reason": self.name},
        )
