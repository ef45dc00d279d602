from __future__ import annotations

from slotbot.application.ports.message_platform import MessagePlatformPort
from slotbot.domain.entities.outbound_message import ListRow
from slotbot.infrastructure.wati.wati_client import WatiClient


class WatiPlatform(MessagePlatformPort):
    def __init__(self, client: WatiClient) -> None:
        self._client = client

    def send_text(self, recipient_id: str, text: str) -> None:
        self._client.send_session_message(recipient_id, text)

    def send_buttons(self, recipient_id: str, text: str, options: list[str]) -> None:
        self._client.send_interactive_buttons(
            recipient_id,
            {"body": text, "buttons": [{"text": option} for option in options]},
        )

    def send_list(
        self,
        recipient_id: str,
        text: str,
        title: str,
        button_label: str,
        rows: list[ListRow],
    ) -> None:
        self._client.send_interactive_list(
            recipient_id,
            {
                "header": "",
                "body": text,
                "footer": "",
                "buttonText": button_label,
                "sections": [
                    {
                        "title": title,
                        "rows": [
                            {"title": row.title, "description": row.description or ""} for row in rows
                        ],
                    }
                ],
            },
        )
