from __future__ import annotations

from abc import ABC, abstractmethod

from slotbot.domain.entities.appointment import Appointment, AppointmentStatus


def slot_lock_key(tenant_id: str, service_id: str, date: str, time: str) -> str:
    return f"{tenant_id}:{service_id}:{date}:{time}"


class BookingLedgerPort(ABC):
    @abstractmethod
    def acquire_lock(self, key: str, ttl_seconds: float) -> bool:
        """
        Atomically create the lock record if none exists or the existing one expired.
        Returns False when a live lock is held by someone else.
        """
        raise NotImplementedError

    @abstractmethod
    def release_lock(self, key: str) -> None:
        """Delete the lock record. Idempotent."""
        raise NotImplementedError

    @abstractmethod
    def save_appointment(self, appointment: Appointment) -> None:
        raise NotImplementedError

    @abstractmethod
    def get_appointments_in_range(
        self,
        tenant_id: str,
        service_id: str,
        start_date: str,
        end_date: str,
    ) -> list[Appointment]:
        """Non-cancelled appointments of a service with start_date <= date <= end_date."""
        raise NotImplementedError

    @abstractmethod
    def check_availability(self, tenant_id: str, service_id: str, date: str, time: str) -> bool:
        """True iff no non-cancelled appointment exists for that exact slot."""
        raise NotImplementedError

    @abstractmethod
    def get_appointment_by_folio(self, tenant_id: str, folio: str) -> Appointment | None:
        raise NotImplementedError

    @abstractmethod
    def update_appointment_status(
        self,
        tenant_id: str,
        appointment_id: str,
        status: AppointmentStatus,
    ) -> Appointment | None:
        """Returns the updated appointment, or None if it does not exist."""
        raise NotImplementedError
