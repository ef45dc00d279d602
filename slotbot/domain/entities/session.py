from __future__ import annotations

from dataclasses import dataclass, field

from slotbot.domain.entities.conversation_status import ConversationStatus


@dataclass(frozen=True)
class SessionMemory:
    service_id: str | None = None
    service_name: str | None = None
    date: str | None = None  # YYYY-MM-DD
    turn: str | None = None
    time: str | None = None  # HH:MM
    customer_name: str | None = None
    last_folio: str | None = None


@dataclass(frozen=True)
class Session:
    tenant_id: str
    customer_id: str
    state: ConversationStatus = ConversationStatus.IDLE
    memory: SessionMemory = field(default_factory=SessionMemory)
    expires_at: float = 0.0
    updated_at: float | None = None

    def is_expired(self, now_ts: float) -> bool:
        return self.expires_at <= now_ts


def new_session(tenant_id: str, customer_id: str, now_ts: float, ttl_seconds: float) -> Session:
    return Session(
        tenant_id=tenant_id,
        customer_id=customer_id,
        state=ConversationStatus.IDLE,
        memory=SessionMemory(),
        expires_at=now_ts + ttl_seconds,
        updated_at=now_ts,
    )
