"""
Shared fixtures: a two-service tenant, a controllable clock and a wired orchestrator.
"""

from __future__ import annotations

from datetime import date

import pytest

from slotbot.application.fsm.base import ConversationContext, FlowDependencies
from slotbot.application.fsm.orchestrator import ConversationOrchestrator, build_state_handlers
from slotbot.application.use_cases.availability import AvailabilityCalculator
from slotbot.application.use_cases.booking import BookingUseCase
from slotbot.domain.entities.conversation_status import ConversationStatus
from slotbot.domain.entities.session import Session, SessionMemory
from slotbot.infrastructure.store.memory_store import MemoryBookingStore
from slotbot.infrastructure.tenants.tenant_directory_store import TenantDirectoryStore

TENANT_ID = "salon-1"
CUSTOMER_ID = "5215511111111"
# Wednesday
TODAY = date(2024, 5, 22)

TENANT = {
    "id": TENANT_ID,
    "name": "Salón Uno",
    "phone": "+52 1 55 0000 0001",
    "platform": "whatsapp",
    "config": {
        "workDays": [1, 2, 3, 4, 5],
        "startTime": "09:00",
        "endTime": "18:00",
        "maxDaysFuture": 7,
        "maxTurnsPerDay": {"1": 2, "2": 2, "3": 2, "4": 2, "5": 2},
        "holidays": [],
    },
    "services": [
        {"id": "srv-1", "name": "Manicura", "durationMinutes": 60, "price": 200},
        {"id": "srv-2", "name": "Pedicura", "durationMinutes": 45},
    ],
}


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock) -> MemoryBookingStore:
    return MemoryBookingStore(clock=clock)


@pytest.fixture
def tenants() -> TenantDirectoryStore:
    return TenantDirectoryStore(tenants=[TENANT])


@pytest.fixture
def availability(store) -> AvailabilityCalculator:
    return AvailabilityCalculator(ledger=store)


@pytest.fixture
def booking(store, clock) -> BookingUseCase:
    return BookingUseCase(ledger=store, lock_ttl_seconds=30, clock=clock)


@pytest.fixture
def deps(tenants, availability, booking) -> FlowDependencies:
    return FlowDependencies(
        tenants=tenants,
        availability=availability,
        booking=booking,
        max_list_rows=10,
        today=lambda tz: TODAY,
    )


@pytest.fixture
def orchestrator(deps, store, clock) -> ConversationOrchestrator:
    return ConversationOrchestrator(
        handlers=build_state_handlers(deps),
        sessions=store,
        session_ttl_seconds=3600,
        clock=clock,
    )


def make_session(
    state: ConversationStatus = ConversationStatus.IDLE,
    expires_at: float = 1_700_003_600.0,
    **memory,
) -> Session:
    return Session(
        tenant_id=TENANT_ID,
        customer_id=CUSTOMER_ID,
        state=state,
        memory=SessionMemory(**memory),
        expires_at=expires_at,
    )


def make_context(session: Session, text: str, intent: str | None = None) -> ConversationContext:
    return ConversationContext(
        tenant_id=TENANT_ID,
        platform="whatsapp",
        customer_id=CUSTOMER_ID,
        session=session,
        text=text,
        intent=intent,
    )
