from __future__ import annotations

import json
import logging
import time
from contextlib import contextmanager
from datetime import date, timedelta
from typing import Callable, Iterator

import redis

from slotbot.application.exceptions import StoreError
from slotbot.application.ports.booking_ledger import BookingLedgerPort
from slotbot.application.ports.session_store import SessionStorePort
from slotbot.domain.entities.appointment import Appointment, AppointmentStatus
from slotbot.domain.entities.session import Session
from slotbot.infrastructure.store.serialization import (
    deserialize_appointment,
    deserialize_session,
    serialize_appointment,
    serialize_session,
)

KEY_PREFIX = "slotbot"
PROCESSED_TTL_SECONDS = 24 * 3600


class RedisBookingStore(SessionStorePort, BookingLedgerPort):
    """
    Shared store for several webhook workers.

    Slot locks use SET NX PX, so acquisition is one atomic command and a
    crashed holder's lock expires server-side. Sessions are written with EX
    and disappear passively once their TTL elapses.
    """

    def __init__(self, client: redis.Redis, clock: Callable[[], float] = time.time) -> None:
        self._client = client
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    @classmethod
    def from_url(cls, url: str) -> "RedisBookingStore":
        client = redis.Redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=5.0,
            socket_connect_timeout=5.0,
        )
        return cls(client)

    @contextmanager
    def _errors(self, operation: str) -> Iterator[None]:
        try:
            yield
        except redis.exceptions.RedisError as e:
            self._logger.error("Redis operation failed", extra={"reason": operation, "error": str(e)})
            raise StoreError(f"Redis {operation} failed: {e}") from e

    def get_session(self, tenant_id: str, customer_id: str) -> Session | None:
        with self._errors("get_session"):
            raw = self._client.get(_session_key(tenant_id, customer_id))
        if not raw:
            return None
        try:
            session = deserialize_session(json.loads(raw))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError):
            self._logger.warning("Discarding unreadable session", extra={"tenant_id": tenant_id})
            return None
        if session.is_expired(self._clock()):
            return None
        return session

    def save_session(self, session: Session) -> None:
        ttl = max(1, int(session.expires_at - self._clock()))
        payload = json.dumps(serialize_session(session), ensure_ascii=False)
        with self._errors("save_session"):
            self._client.set(_session_key(session.tenant_id, session.customer_id), payload, ex=ttl)

    def has_processed(self, tenant_id: str, message_id: str) -> bool:
        with self._errors("has_processed"):
            return bool(self._client.exists(_processed_key(tenant_id, message_id)))

    def mark_processed(self, tenant_id: str, message_id: str) -> None:
        with self._errors("mark_processed"):
            self._client.set(_processed_key(tenant_id, message_id), "1", ex=PROCESSED_TTL_SECONDS)

    def acquire_lock(self, key: str, ttl_seconds: float) -> bool:
        expires_at = self._clock() + ttl_seconds
        with self._errors("acquire_lock"):
            acquired = self._client.set(
                _lock_key(key),
                str(expires_at),
                nx=True,
                px=max(1, int(ttl_seconds * 1000)),
            )
        return bool(acquired)

    def release_lock(self, key: str) -> None:
        with self._errors("release_lock"):
            self._client.delete(_lock_key(key))

    def save_appointment(self, appointment: Appointment) -> None:
        payload = json.dumps(serialize_appointment(appointment), ensure_ascii=False)
        tenant_id = appointment.tenant_id
        with self._errors("save_appointment"):
            pipe = self._client.pipeline(transaction=True)
            pipe.set(_appointment_key(tenant_id, appointment.id), payload)
            pipe.sadd(_day_index_key(tenant_id, appointment.service_id, appointment.date), appointment.id)
            if appointment.folio:
                pipe.set(_folio_key(tenant_id, appointment.folio), appointment.id)
            pipe.execute()

    def _appointments_for_day(self, tenant_id: str, service_id: str, day: str) -> list[Appointment]:
        with self._errors("load_appointments"):
            ids = sorted(self._client.smembers(_day_index_key(tenant_id, service_id, day)) or ())
            if not ids:
                return []
            raws = self._client.mget([_appointment_key(tenant_id, appointment_id) for appointment_id in ids])
        return [deserialize_appointment(json.loads(raw)) for raw in raws if raw]

    def get_appointments_in_range(
        self,
        tenant_id: str,
        service_id: str,
        start_date: str,
        end_date: str,
    ) -> list[Appointment]:
        start = date.fromisoformat(start_date)
        end = date.fromisoformat(end_date)
        appointments: list[Appointment] = []
        day = start
        while day <= end:
            appointments.extend(
                a for a in self._appointments_for_day(tenant_id, service_id, day.isoformat()) if a.is_active
            )
            day += timedelta(days=1)
        return sorted(appointments, key=lambda a: (a.date, a.time))

    def check_availability(self, tenant_id: str, service_id: str, date: str, time: str) -> bool:
        return not any(
            a.time == time and a.is_active for a in self._appointments_for_day(tenant_id, service_id, date)
        )

    def get_appointment_by_folio(self, tenant_id: str, folio: str) -> Appointment | None:
        with self._errors("get_appointment_by_folio"):
            appointment_id = self._client.get(_folio_key(tenant_id, folio))
            if not appointment_id:
                return None
            raw = self._client.get(_appointment_key(tenant_id, appointment_id))
        return deserialize_appointment(json.loads(raw)) if raw else None

    def update_appointment_status(
        self,
        tenant_id: str,
        appointment_id: str,
        status: AppointmentStatus,
    ) -> Appointment | None:
        key = _appointment_key(tenant_id, appointment_id)
        with self._errors("update_appointment_status"):
            with self._client.pipeline() as pipe:
                while True:
                    try:
                        pipe.watch(key)
                        raw = pipe.get(key)
                        if not raw:
                            pipe.unwatch()
                            return None
                        data = json.loads(raw)
                        data["status"] = status.value
                        pipe.multi()
                        pipe.set(key, json.dumps(data, ensure_ascii=False))
                        pipe.execute()
                        break
                    except redis.exceptions.WatchError:
                        # Another writer touched the appointment; read it again
                        continue
        return deserialize_appointment(data)


def _session_key(tenant_id: str, customer_id: str) -> str:
    return f"{KEY_PREFIX}:session:{tenant_id}:{customer_id}"


def _lock_key(key: str) -> str:
    return f"{KEY_PREFIX}:lock:{key}"


def _appointment_key(tenant_id: str, appointment_id: str) -> str:
    return f"{KEY_PREFIX}:appointment:{tenant_id}:{appointment_id}"


def _day_index_key(tenant_id: str, service_id: str, day: str) -> str:
    return f"{KEY_PREFIX}:appointments:{tenant_id}:{service_id}:{day}"


def _folio_key(tenant_id: str, folio: str) -> str:
    return f"{KEY_PREFIX}:folio:{tenant_id}:{folio}"


def _processed_key(tenant_id: str, message_id: str) -> str:
    return f"{KEY_PREFIX}:processed:{tenant_id}:{message_id}"
