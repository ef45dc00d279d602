from __future__ import annotations

from slotbot.application.ports.message_platform import MessagePlatformPort
from slotbot.domain.entities.outbound_message import ListRow
from slotbot.infrastructure.whatsapp.payloads import buttons_payload, list_payload, text_payload
from slotbot.infrastructure.whatsapp.whatsapp_client import WhatsAppCloudClient


class WhatsAppCloudPlatform(MessagePlatformPort):
    def __init__(self, client: WhatsAppCloudClient) -> None:
        self._client = client

    def send_text(self, recipient_id: str, text: str) -> None:
        self._client.send(text_payload(recipient_id, text))

    def send_buttons(self, recipient_id: str, text: str, options: list[str]) -> None:
        self._client.send(buttons_payload(recipient_id, text, options))

    def send_list(
        self,
        recipient_id: str,
        text: str,
        title: str,
        button_label: str,
        rows: list[ListRow],
    ) -> None:
        self._client.send(list_payload(recipient_id, text, title, button_label, rows))
