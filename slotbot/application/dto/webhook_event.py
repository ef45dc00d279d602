from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from slotbot.application.utils.message_parser import parse_message
from slotbot.domain.entities.message import InboundMessage


@dataclass(frozen=True)
class InboundEnvelope:
    """A normalized customer message plus the business number it was sent to."""

    channel_number: str | None
    message: InboundMessage


def _to_timestamp(value: Any) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return int(time.time())


class WatiListReply(BaseModel):
    title: str | None = None
    description: str | None = None


class WatiButtonReply(BaseModel):
    text: str | None = None


class WatiWebhookDTO(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str | None = None
    wa_id: str | None = Field(default=None, alias="waId")
    text: str | None = None
    type: str | None = None
    timestamp: str | int | float | None = None
    sender_name: str | None = Field(default=None, alias="senderName")
    list_reply: WatiListReply | None = Field(default=None, alias="listReply")
    button_reply: WatiButtonReply | None = Field(default=None, alias="buttonReply")
    whatsapp_id: str | None = Field(default=None, alias="whatsappId")
    destination_number: str | None = Field(default=None, alias="destinationNumber")

    def extract_messages(self) -> list[InboundEnvelope]:
        if not self.wa_id:
            return []

        # Interactive replies carry the chosen option title
        raw_text = self.text or ""
        if self.list_reply and self.list_reply.title:
            raw_text = self.list_reply.title
        elif self.button_reply and self.button_reply.text:
            raw_text = self.button_reply.text

        parsed = parse_message(raw_text)
        if not parsed.text:
            return []

        message = InboundMessage(
            id=self.id or str(uuid.uuid4()),
            customer_id=str(self.wa_id),
            text=parsed.text,
            timestamp=_to_timestamp(self.timestamp),
            platform="wati",
            sender_name=self.sender_name,
            code=parsed.code,
        )
        return [InboundEnvelope(channel_number=self.destination_number or self.whatsapp_id, message=message)]


class WhatsAppWebhookDTO(BaseModel):
    object: str | None = None
    entry: list[dict[str, Any]] = Field(default_factory=list)

    def extract_messages(self) -> list[InboundEnvelope]:
        envelopes: list[InboundEnvelope] = []
        for entry in self.entry or []:
            for change in entry.get("changes", []) or []:
                value = change.get("value") or {}
                metadata = value.get("metadata") or {}
                channel_number = metadata.get("phone_number_id") or metadata.get("display_phone_number")

                contacts = value.get("contacts") or []
                sender_name = ((contacts[0].get("profile") or {}).get("name")) if contacts else None

                for msg in value.get("messages", []) or []:
                    sender = msg.get("from")
                    mid = msg.get("id")
                    parsed = parse_message(_message_text(msg))
                    if not (sender and mid and parsed.text):
                        continue

                    envelopes.append(
                        InboundEnvelope(
                            channel_number=str(channel_number) if channel_number else None,
                            message=InboundMessage(
                                id=str(mid),
                                customer_id=str(sender),
                                text=parsed.text,
                                timestamp=_to_timestamp(msg.get("timestamp")),
                                platform="whatsapp",
                                sender_name=sender_name,
                                code=parsed.code,
                            ),
                        )
                    )
        return envelopes


def _message_text(msg: dict[str, Any]) -> str:
    msg_type = msg.get("type")
    if msg_type == "text":
        return (msg.get("text") or {}).get("body") or ""
    if msg_type == "interactive":
        interactive = msg.get("interactive") or {}
        reply = interactive.get("list_reply") or interactive.get("button_reply") or {}
        return reply.get("title") or ""
    if msg_type == "button":
        return (msg.get("button") or {}).get("text") or ""
    return ""
