from __future__ import annotations

import json
import logging
import re
import threading
import time
from pathlib import Path
from typing import Any, Callable

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

PROCESSED_HISTORY_LIMIT = 1000


class JsonBookingStore(SessionStorePort, BookingLedgerPort):
    """
    File-backed store for local development.

    Locking is process-local (threading locks), so this store must not be
    shared by several worker processes. Use RedisBookingStore for that.
    """

    def __init__(self, data_dir: str = "./data", clock: Callable[[], float] = time.time) -> None:
        self._data_dir = Path(data_dir)
        (self._data_dir / "sessions").mkdir(parents=True, exist_ok=True)
        (self._data_dir / "appointments").mkdir(parents=True, exist_ok=True)
        self._clock = clock
        self._locks: dict[str, threading.Lock] = {}
        self._lock_lock = threading.Lock()  # Lock for managing locks dict
        self._logger = logging.getLogger(__name__)

    def _get_lock(self, name: str) -> threading.Lock:
        """Get or create a lock for a file name."""
        with self._lock_lock:
            if name not in self._locks:
                self._locks[name] = threading.Lock()
            return self._locks[name]

    def _session_path(self, tenant_id: str, customer_id: str) -> Path:
        return self._data_dir / "sessions" / _safe_name(tenant_id) / f"{_safe_name(customer_id)}.json"

    def _appointments_path(self, tenant_id: str) -> Path:
        return self._data_dir / "appointments" / f"{_safe_name(tenant_id)}.json"

    def _slot_locks_path(self) -> Path:
        return self._data_dir / "slot_locks.json"

    def _processed_path(self, tenant_id: str) -> Path:
        return self._data_dir / "processed" / f"{_safe_name(tenant_id)}.json"

    def _load(self, path: Path) -> dict[str, Any]:
        if not path.exists():
            return {}
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return data if isinstance(data, dict) else {}
        except (json.JSONDecodeError, IOError):
            self._logger.warning("Corrupted store file ignored", extra={"reason": str(path)})
            return {}

    def _save(self, path: Path, data: dict[str, Any]) -> None:
        """Save data to a JSON file atomically."""
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = path.with_suffix(".json.tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            # Atomic rename
            temp_path.replace(path)
        except Exception:
            # Clean up temp file on error
            if temp_path.exists():
                temp_path.unlink()
            raise

    def get_session(self, tenant_id: str, customer_id: str) -> Session | None:
        path = self._session_path(tenant_id, customer_id)
        with self._get_lock(str(path)):
            data = self._load(path)
        if not data:
            return None
        try:
            session = deserialize_session(data)
        except (KeyError, TypeError, ValueError):
            return None
        if session.is_expired(self._clock()):
            return None
        return session

    def save_session(self, session: Session) -> None:
        path = self._session_path(session.tenant_id, session.customer_id)
        with self._get_lock(str(path)):
            self._save(path, serialize_session(session))

    def has_processed(self, tenant_id: str, message_id: str) -> bool:
        path = self._processed_path(tenant_id)
        with self._get_lock(str(path)):
            data = self._load(path)
        return message_id in data.get("processed_message_ids", [])

    def mark_processed(self, tenant_id: str, message_id: str) -> None:
        path = self._processed_path(tenant_id)
        with self._get_lock(str(path)):
            data = self._load(path)
            processed = data.get("processed_message_ids", [])
            if message_id in processed:
                return
            processed.append(message_id)
            # Keep last N processed IDs
            data["processed_message_ids"] = processed[-PROCESSED_HISTORY_LIMIT:]
            self._save(path, data)

    def acquire_lock(self, key: str, ttl_seconds: float) -> bool:
        path = self._slot_locks_path()
        now = self._clock()
        with self._get_lock(str(path)):
            locks = self._load(path)
            expires_at = locks.get(key)
            if expires_at is not None and float(expires_at) > now:
                return False
            locks[key] = now + ttl_seconds
            self._save(path, locks)
            return True

    def release_lock(self, key: str) -> None:
        path = self._slot_locks_path()
        with self._get_lock(str(path)):
            locks = self._load(path)
            if locks.pop(key, None) is not None:
                self._save(path, locks)

    def _load_appointments(self, tenant_id: str) -> list[Appointment]:
        path = self._appointments_path(tenant_id)
        with self._get_lock(str(path)):
            data = self._load(path)
        return [deserialize_appointment(item) for item in data.values()]

    def save_appointment(self, appointment: Appointment) -> None:
        path = self._appointments_path(appointment.tenant_id)
        with self._get_lock(str(path)):
            data = self._load(path)
            data[appointment.id] = serialize_appointment(appointment)
            self._save(path, data)

    def get_appointments_in_range(
        self,
        tenant_id: str,
        service_id: str,
        start_date: str,
        end_date: str,
    ) -> list[Appointment]:
        return sorted(
            (
                a
                for a in self._load_appointments(tenant_id)
                if a.service_id == service_id and start_date <= a.date <= end_date and a.is_active
            ),
            key=lambda a: (a.date, a.time),
        )

    def check_availability(self, tenant_id: str, service_id: str, date: str, time: str) -> bool:
        return not any(
            a.service_id == service_id and a.date == date and a.time == time and a.is_active
            for a in self._load_appointments(tenant_id)
        )

    def get_appointment_by_folio(self, tenant_id: str, folio: str) -> Appointment | None:
        for appointment in self._load_appointments(tenant_id):
            if appointment.folio == folio:
                return appointment
        return None

    def update_appointment_status(
        self,
        tenant_id: str,
        appointment_id: str,
        status: AppointmentStatus,
    ) -> Appointment | None:
        path = self._appointments_path(tenant_id)
        with self._get_lock(str(path)):
            data = self._load(path)
            raw = data.get(appointment_id)
            if raw is None:
                return None
            raw["status"] = status.value
            self._save(path, data)
            return deserialize_appointment(raw)


def _safe_name(value: str) -> str:
    return re.sub(r"[^A-Za-z0-9_\-]", "_", value) or "_"
