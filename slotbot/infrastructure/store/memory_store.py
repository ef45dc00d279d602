from __future__ import annotations

import threading
import time
from dataclasses import replace
from typing import Callable

from slotbot.application.ports.booking_ledger import BookingLedgerPort
from slotbot.application.ports.session_store import SessionStorePort
from slotbot.domain.entities.appointment import Appointment, AppointmentStatus
from slotbot.domain.entities.session import Session


class MemoryBookingStore(SessionStorePort, BookingLedgerPort):
    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._sessions: dict[tuple[str, str], Session] = {}
        self._appointments: dict[str, dict[str, Appointment]] = {}
        self._locks: dict[str, float] = {}  # key -> expires_at
        self._processed: set[tuple[str, str]] = set()
        self._mutex = threading.Lock()

    def get_session(self, tenant_id: str, customer_id: str) -> Session | None:
        with self._mutex:
            session = self._sessions.get((tenant_id, customer_id))
        if session is None or session.is_expired(self._clock()):
            return None
        return session

    def save_session(self, session: Session) -> None:
        with self._mutex:
            self._sessions[(session.tenant_id, session.customer_id)] = session

    def has_processed(self, tenant_id: str, message_id: str) -> bool:
        with self._mutex:
            return (tenant_id, message_id) in self._processed

    def mark_processed(self, tenant_id: str, message_id: str) -> None:
        with self._mutex:
            self._processed.add((tenant_id, message_id))

    def acquire_lock(self, key: str, ttl_seconds: float) -> bool:
        now = self._clock()
        with self._mutex:
            expires_at = self._locks.get(key)
            if expires_at is not None and expires_at > now:
                return False
            self._locks[key] = now + ttl_seconds
            return True

    def release_lock(self, key: str) -> None:
        with self._mutex:
            self._locks.pop(key, None)

    def save_appointment(self, appointment: Appointment) -> None:
        with self._mutex:
            self._appointments.setdefault(appointment.tenant_id, {})[appointment.id] = appointment

    def get_appointments_in_range(
        self,
        tenant_id: str,
        service_id: str,
        start_date: str,
        end_date: str,
    ) -> list[Appointment]:
        with self._mutex:
            appointments = list(self._appointments.get(tenant_id, {}).values())
        return sorted(
            (
                a
                for a in appointments
                if a.service_id == service_id and start_date <= a.date <= end_date and a.is_active
            ),
            key=lambda a: (a.date, a.time),
        )

    def check_availability(self, tenant_id: str, service_id: str, date: str, time: str) -> bool:
        with self._mutex:
            appointments = list(self._appointments.get(tenant_id, {}).values())
        return not any(
            a.service_id == service_id and a.date == date and a.time == time and a.is_active
            for a in appointments
        )

    def get_appointment_by_folio(self, tenant_id: str, folio: str) -> Appointment | None:
        with self._mutex:
            appointments = list(self._appointments.get(tenant_id, {}).values())
        for appointment in appointments:
            if appointment.folio == folio:
                return appointment
        return None

    def update_appointment_status(
        self,
        tenant_id: str,
        appointment_id: str,
        status: AppointmentStatus,
    ) -> Appointment | None:
        with self._mutex:
            appointments = self._appointments.get(tenant_id, {})
            current = appointments.get(appointment_id)
            if current is None:
                return None
            updated = replace(current, status=status)
            appointments[appointment_id] = updated
            return updated
