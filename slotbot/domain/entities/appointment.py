from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class BookingRequest:
    customer_id: str
    service_id: str
    service_name: str
    date: str
    time: str
    turn: str | None = None
    customer_name: str | None = None
    employee_id: str | None = None


@dataclass(frozen=True)
class Appointment:
    id: str
    tenant_id: str
    customer_id: str
    service_id: str
    service_name: str
    date: str  # YYYY-MM-DD
    time: str  # HH:MM
    folio: str
    created_at: float
    status: AppointmentStatus = AppointmentStatus.CONFIRMED
    turn: str | None = None
    customer_name: str | None = None
    employee_id: str | None = None
    commission_amount: float = 0.0

    @property
    def is_active(self) -> bool:
        return self.status != AppointmentStatus.CANCELLED
