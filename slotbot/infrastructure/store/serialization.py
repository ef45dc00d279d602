from __future__ import annotations

from dataclasses import asdict
from typing import Any

from slotbot.domain.entities.appointment import Appointment, AppointmentStatus
from slotbot.domain.entities.conversation_status import ConversationStatus
from slotbot.domain.entities.session import Session, SessionMemory


def serialize_session(session: Session) -> dict[str, Any]:
    return {
        "tenant_id": session.tenant_id,
        "customer_id": session.customer_id,
        "state": session.state.value,
        "memory": asdict(session.memory),
        "expires_at": session.expires_at,
        "updated_at": session.updated_at,
        "version": 1,
    }


def deserialize_session(data: dict[str, Any]) -> Session:
    memory_raw = data.get("memory") or {}
    known = SessionMemory.__dataclass_fields__.keys()
    memory = SessionMemory(**{k: v for k, v in memory_raw.items() if k in known})
    return Session(
        tenant_id=str(data["tenant_id"]),
        customer_id=str(data["customer_id"]),
        state=ConversationStatus.parse(data.get("state")),
        memory=memory,
        expires_at=float(data.get("expires_at") or 0.0),
        updated_at=data.get("updated_at"),
    )


def serialize_appointment(appointment: Appointment) -> dict[str, Any]:
    data = asdict(appointment)
    data["status"] = appointment.status.value
    return data


def deserialize_appointment(data: dict[str, Any]) -> Appointment:
    try:
        status = AppointmentStatus(data.get("status", "confirmed"))
    except ValueError:
        status = AppointmentStatus.PENDING
    return Appointment(
        id=str(data["id"]),
        tenant_id=str(data["tenant_id"]),
        customer_id=str(data["customer_id"]),
        service_id=str(data["service_id"]),
        service_name=str(data.get("service_name") or ""),
        date=str(data["date"]),
        time=str(data["time"]),
        folio=str(data.get("folio") or ""),
        created_at=float(data.get("created_at") or 0.0),
        status=status,
        turn=data.get("turn"),
        customer_name=data.get("customer_name"),
        employee_id=data.get("employee_id"),
        commission_amount=float(data.get("commission_amount") or 0.0),
    )
