from dataclasses import dataclass


@dataclass(frozen=True)
class InboundMessage:
    id: str
    customer_id: str
    text: str
    timestamp: int
    platform: str
    sender_name: str | None = None
    code: str | None = None  # optional "CODE:" prefix split off the text
