"""
Tests for slot locks, booking and cancellation across the store backends.
"""

from __future__ import annotations

import json
import re
import threading
from dataclasses import replace
from unittest.mock import MagicMock

import pytest
import redis

from conftest import TENANT_ID, FakeClock

from slotbot.application.exceptions import StoreError
from slotbot.application.ports.booking_ledger import slot_lock_key
from slotbot.application.use_cases.booking import BookingUseCase, generate_folio
from slotbot.domain.entities.appointment import Appointment, AppointmentStatus, BookingRequest
from slotbot.infrastructure.store.json_store import JsonBookingStore
from slotbot.infrastructure.store.memory_store import MemoryBookingStore
from slotbot.infrastructure.store.redis_store import RedisBookingStore
from slotbot.infrastructure.store.serialization import serialize_appointment

REQUEST = BookingRequest(
    customer_id="5215511111111",
    service_id="srv-1",
    service_name="Manicura",
    date="2024-05-23",
    time="09:00",
    turn="Matutino",
    customer_name="Ana López",
)


@pytest.fixture(params=["memory", "json"])
def ledger(request, tmp_path, clock):
    if request.param == "json":
        return JsonBookingStore(data_dir=str(tmp_path), clock=clock)
    return MemoryBookingStore(clock=clock)


def test_release_lock_is_idempotent(ledger):
    """Releasing a never-acquired or already released key is a no-op."""
    ledger.release_lock("never-acquired")
    assert ledger.acquire_lock("k", 30)
    ledger.release_lock("k")
    ledger.release_lock("k")
    assert ledger.acquire_lock("k", 30)


def test_live_lock_blocks_second_acquire(ledger):
    assert ledger.acquire_lock("k", 30) is True
    assert ledger.acquire_lock("k", 30) is False


def test_expired_lock_can_be_taken_over(ledger, clock):
    """A crashed holder's lock stops blocking once its TTL passes."""
    assert ledger.acquire_lock("k", 30)
    clock.advance(31)
    assert ledger.acquire_lock("k", 30) is True


def test_concurrent_acquire_has_single_winner(ledger):
    """Two threads racing for the same key: exactly one wins."""
    barrier = threading.Barrier(2)
    results: list[bool] = []
    results_lock = threading.Lock()

    def worker():
        barrier.wait()
        acquired = ledger.acquire_lock("tenant:srv-1:2024-05-23:09:00", 30)
        with results_lock:
            results.append(acquired)

    threads = [threading.Thread(target=worker) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(results) == [False, True]


def test_book_appointment_persists_and_releases_lock(ledger, clock):
    use_case = BookingUseCase(ledger, lock_ttl_seconds=30, clock=clock)

    appointment = use_case.book_appointment(TENANT_ID, REQUEST)

    assert appointment is not None
    assert re.fullmatch(r"APP-[A-Z0-9]{6}", appointment.folio)
    assert appointment.status == AppointmentStatus.CONFIRMED
    assert ledger.get_appointment_by_folio(TENANT_ID, appointment.folio) == appointment
    assert not ledger.check_availability(TENANT_ID, "srv-1", "2024-05-23", "09:00")
    # Lock was released in the finally block
    assert ledger.acquire_lock(slot_lock_key(TENANT_ID, "srv-1", "2024-05-23", "09:00"), 30)


def test_book_appointment_returns_none_when_lock_busy(ledger, clock):
    """Lock contention writes nothing."""
    use_case = BookingUseCase(ledger, lock_ttl_seconds=30, clock=clock)
    ledger.acquire_lock(slot_lock_key(TENANT_ID, "srv-1", "2024-05-23", "09:00"), 30)

    assert use_case.book_appointment(TENANT_ID, REQUEST) is None
    assert ledger.get_appointments_in_range(TENANT_ID, "srv-1", "2024-05-23", "2024-05-23") == []


def test_duplicate_delivery_does_not_double_book(ledger, clock):
    """A repeated request from the same customer gets the appointment already made."""
    use_case = BookingUseCase(ledger, lock_ttl_seconds=30, clock=clock)

    first = use_case.book_appointment(TENANT_ID, REQUEST)
    second = use_case.book_appointment(TENANT_ID, REQUEST)

    assert first is not None
    assert second == first
    assert len(ledger.get_appointments_in_range(TENANT_ID, "srv-1", "2024-05-23", "2024-05-23")) == 1


def test_taken_slot_is_refused_to_another_customer(ledger, clock):
    use_case = BookingUseCase(ledger, lock_ttl_seconds=30, clock=clock)
    use_case.book_appointment(TENANT_ID, REQUEST)

    other = use_case.book_appointment(TENANT_ID, replace(REQUEST, customer_id="5215522222222"))

    assert other is None
    assert len(ledger.get_appointments_in_range(TENANT_ID, "srv-1", "2024-05-23", "2024-05-23")) == 1


def test_lock_released_when_save_fails():
    """The lock is released even if persisting the appointment raises."""
    ledger = MagicMock()
    ledger.acquire_lock.return_value = True
    ledger.check_availability.return_value = True
    ledger.save_appointment.side_effect = StoreError("disk full")
    use_case = BookingUseCase(ledger, lock_ttl_seconds=30, clock=FakeClock())

    with pytest.raises(StoreError):
        use_case.book_appointment(TENANT_ID, REQUEST)

    ledger.release_lock.assert_called_once_with(slot_lock_key(TENANT_ID, "srv-1", "2024-05-23", "09:00"))


def test_cancel_appointment_frees_the_slot(ledger, clock):
    use_case = BookingUseCase(ledger, lock_ttl_seconds=30, clock=clock)
    appointment = use_case.book_appointment(TENANT_ID, REQUEST)

    cancelled = use_case.cancel_appointment(TENANT_ID, REQUEST.customer_id, appointment.folio)

    assert cancelled.status == AppointmentStatus.CANCELLED
    assert ledger.check_availability(TENANT_ID, "srv-1", "2024-05-23", "09:00")


def test_cancel_rejects_other_customers_and_unknown_folios(ledger, clock):
    use_case = BookingUseCase(ledger, lock_ttl_seconds=30, clock=clock)
    appointment = use_case.book_appointment(TENANT_ID, REQUEST)

    assert use_case.cancel_appointment(TENANT_ID, "someone-else", appointment.folio) is None
    assert use_case.cancel_appointment(TENANT_ID, REQUEST.customer_id, "APP-ZZZZZZ") is None
    assert not ledger.check_availability(TENANT_ID, "srv-1", "2024-05-23", "09:00")


def test_generate_folio_format():
    folios = {generate_folio() for _ in range(50)}
    assert all(re.fullmatch(r"APP-[A-Z0-9]{6}", f) for f in folios)
    assert len(folios) > 1


def test_redis_acquire_lock_uses_set_nx_px(clock):
    client = MagicMock()
    client.set.return_value = True
    store = RedisBookingStore(client, clock=clock)

    assert store.acquire_lock("t:s:d:09:00", 30) is True

    args, kwargs = client.set.call_args
    assert args[0] == "slotbot:lock:t:s:d:09:00"
    assert kwargs["nx"] is True
    assert kwargs["px"] == 30000


def test_redis_acquire_lock_reports_contention(clock):
    client = MagicMock()
    client.set.return_value = None
    store = RedisBookingStore(client, clock=clock)

    assert store.acquire_lock("k", 30) is False


def test_redis_errors_become_store_errors(clock):
    client = MagicMock()
    client.delete.side_effect = redis.exceptions.ConnectionError("down")
    store = RedisBookingStore(client, clock=clock)

    with pytest.raises(StoreError):
        store.release_lock("k")


def _stored_appointment() -> str:
    appointment = Appointment(
        id="a-1",
        tenant_id=TENANT_ID,
        customer_id=REQUEST.customer_id,
        service_id="srv-1",
        service_name="Manicura",
        date="2024-05-23",
        time="09:00",
        folio="APP-AB12CD",
        created_at=0.0,
        status=AppointmentStatus.CONFIRMED,
    )
    return json.dumps(serialize_appointment(appointment))


def _redis_with_pipeline():
    client = MagicMock()
    pipe = MagicMock()
    client.pipeline.return_value.__enter__.return_value = pipe
    return client, pipe


def test_redis_status_update_is_transactional(clock):
    client, pipe = _redis_with_pipeline()
    pipe.get.return_value = _stored_appointment()
    store = RedisBookingStore(client, clock=clock)

    updated = store.update_appointment_status(TENANT_ID, "a-1", AppointmentStatus.CANCELLED)

    assert updated.status == AppointmentStatus.CANCELLED
    pipe.watch.assert_called_once_with(f"slotbot:appointment:{TENANT_ID}:a-1")
    pipe.multi.assert_called_once()
    payload = pipe.set.call_args.args[1]
    assert json.loads(payload)["status"] == "cancelled"
    client.set.assert_not_called()


def test_redis_status_update_retries_after_concurrent_write(clock):
    client, pipe = _redis_with_pipeline()
    pipe.get.return_value = _stored_appointment()
    pipe.execute.side_effect = [redis.exceptions.WatchError(), [True]]
    store = RedisBookingStore(client, clock=clock)

    updated = store.update_appointment_status(TENANT_ID, "a-1", AppointmentStatus.CANCELLED)

    assert updated.status == AppointmentStatus.CANCELLED
    assert pipe.watch.call_count == 2
    assert pipe.execute.call_count == 2


def test_redis_status_update_of_unknown_appointment(clock):
    client, pipe = _redis_with_pipeline()
    pipe.get.return_value = None
    store = RedisBookingStore(client, clock=clock)

    assert store.update_appointment_status(TENANT_ID, "missing", AppointmentStatus.CANCELLED) is None
    pipe.unwatch.assert_called_once()
    pipe.execute.assert_not_called()
