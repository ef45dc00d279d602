from __future__ import annotations

import logging
import secrets
import string
import time
import uuid
from dataclasses import replace
from typing import Callable

from slotbot.application.ports.booking_ledger import BookingLedgerPort, slot_lock_key
from slotbot.domain.entities.appointment import Appointment, AppointmentStatus, BookingRequest

FOLIO_PREFIX = "APP-"
FOLIO_LENGTH = 6
_FOLIO_ALPHABET = string.ascii_uppercase + string.digits


def generate_folio() -> str:
    """Short human-readable booking reference, e.g. APP-7K2Q9D."""
    return FOLIO_PREFIX + "".join(secrets.choice(_FOLIO_ALPHABET) for _ in range(FOLIO_LENGTH))


class BookingUseCase:
    def __init__(
        self,
        ledger: BookingLedgerPort,
        lock_ttl_seconds: float = 30.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._ledger = ledger
        self._lock_ttl_seconds = lock_ttl_seconds
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    def book_appointment(self, tenant_id: str, request: BookingRequest) -> Appointment | None:
        """
        Reserve the slot and persist the appointment.
        Returns None, writing nothing, when the slot lock is held or another customer holds the slot.
        A repeated request from the customer who already holds the slot returns that appointment.
        """
        lock_key = slot_lock_key(tenant_id, request.service_id, request.date, request.time)

        if not self._ledger.acquire_lock(lock_key, self._lock_ttl_seconds):
            self._logger.info("Slot lock busy", extra={"lock_key": lock_key, "tenant_id": tenant_id})
            return None

        try:
            # A duplicate delivery may arrive after the first booking released the lock
            if not self._ledger.check_availability(tenant_id, request.service_id, request.date, request.time):
                existing = self._booked_by(tenant_id, request)
                if existing is not None:
                    self._logger.info(
                        "Slot already booked by this customer",
                        extra={"tenant_id": tenant_id, "folio": existing.folio, "lock_key": lock_key},
                    )
                    return existing
                self._logger.info("Slot already booked", extra={"lock_key": lock_key, "tenant_id": tenant_id})
                return None

            appointment = Appointment(
                id=str(uuid.uuid4()),
                tenant_id=tenant_id,
                customer_id=request.customer_id,
                service_id=request.service_id,
                service_name=request.service_name,
                date=request.date,
                time=request.time,
                folio=generate_folio(),
                created_at=self._clock(),
                status=AppointmentStatus.CONFIRMED,
                turn=request.turn,
                customer_name=request.customer_name,
                employee_id=request.employee_id,
            )
            self._ledger.save_appointment(appointment)
            self._logger.info(
                "Appointment booked",
                extra={"tenant_id": tenant_id, "folio": appointment.folio, "lock_key": lock_key},
            )
            return appointment
        finally:
            self._ledger.release_lock(lock_key)

    def _booked_by(self, tenant_id: str, request: BookingRequest) -> Appointment | None:
        for appointment in self._ledger.get_appointments_in_range(
            tenant_id, request.service_id, request.date, request.date
        ):
            if appointment.time == request.time and appointment.customer_id == request.customer_id:
                return appointment
        return None

    def cancel_appointment(self, tenant_id: str, customer_id: str, folio: str) -> Appointment | None:
        """Cancel a customer's own appointment by folio. Returns None if there is nothing to cancel."""
        appointment = self._ledger.get_appointment_by_folio(tenant_id, folio)
        if appointment is None or appointment.customer_id != customer_id:
            return None
        if appointment.status == AppointmentStatus.CANCELLED:
            return appointment

        updated = self._ledger.update_appointment_status(tenant_id, appointment.id, AppointmentStatus.CANCELLED)
        self._logger.info("Appointment cancelled", extra={"tenant_id": tenant_id, "folio": folio})
        return updated or replace(appointment, status=AppointmentStatus.CANCELLED)
