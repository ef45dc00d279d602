from __future__ import annotations

import logging
from datetime import date, timedelta

from slotbot.application.ports.booking_ledger import BookingLedgerPort
from slotbot.application.utils.message_rules import find_option
from slotbot.application.utils.slot_times import (
    enumerate_slots,
    local_today,
    parse_iso_date,
    to_minutes,
    weekday_index,
)
from slotbot.domain.entities.business_config import BusinessConfig
from slotbot.domain.entities.service import Service

TURN_MORNING = "Matutino"
TURN_AFTERNOON = "Vespertino"
TURN_EVENING = "Nocturno"
TURN_FULL_DAY = "Horario completo"


class AvailabilityCalculator:
    """
    Availability over a tenant's working hours and the bookings already in the ledger.

    Every operation enumerates the same slot grid (open time stepping by the
    service duration), so turns, slots and days always agree with each other.
    """

    def __init__(self, ledger: BookingLedgerPort) -> None:
        self._ledger = ledger
        self._logger = logging.getLogger(__name__)

    def available_days(
        self,
        tenant_id: str,
        config: BusinessConfig,
        service: Service,
        today: date | None = None,
    ) -> list[str]:
        today = today or local_today(config.timezone)
        first_day = today + timedelta(days=1)
        last_day = today + timedelta(days=config.max_days_future)
        if config.max_days_future < 1:
            return []

        appointments = self._ledger.get_appointments_in_range(
            tenant_id,
            service.id,
            first_day.isoformat(),
            last_day.isoformat(),
        )
        booked: dict[str, set[str]] = {}
        for appointment in appointments:
            if appointment.is_active:
                booked.setdefault(appointment.date, set()).add(appointment.time)

        grid = enumerate_slots(config.start_time, config.end_time, service.duration_minutes)

        days: list[str] = []
        for offset in range(1, config.max_days_future + 1):
            day = today + timedelta(days=offset)
            day_str = day.isoformat()
            weekday = weekday_index(day)

            if weekday not in config.work_days or day_str in config.holidays:
                continue
            if config.turns_for_weekday(weekday) <= 0:
                continue

            taken = booked.get(day_str, set())
            if any(slot not in taken for slot in grid):
                days.append(day_str)

        return days

    def available_slots(
        self,
        tenant_id: str,
        config: BusinessConfig,
        service: Service,
        date_str: str,
    ) -> list[str]:
        return [
            slot
            for slot in enumerate_slots(config.start_time, config.end_time, service.duration_minutes)
            if self._ledger.check_availability(tenant_id, service.id, date_str, slot)
        ]

    def turn_count(self, config: BusinessConfig, date_str: str) -> int:
        day = parse_iso_date(date_str)
        if day is None:
            return 0
        return config.turns_for_weekday(weekday_index(day))

    def available_turns(
        self,
        tenant_id: str,
        config: BusinessConfig,
        service: Service,
        date_str: str,
    ) -> list[str]:
        turn_count = self.turn_count(config, date_str)
        labels = turn_labels(turn_count)
        if not labels:
            return []

        slots = self.available_slots(tenant_id, config, service, date_str)
        turns: list[str] = []
        for label in labels:
            start, end = turn_window(config, label, turn_count)
            if any(start <= to_minutes(slot) < end for slot in slots):
                turns.append(label)
        return turns

    def slots_for_turn(
        self,
        tenant_id: str,
        config: BusinessConfig,
        service: Service,
        date_str: str,
        turn: str,
        turn_count: int,
    ) -> list[str]:
        start, end = turn_window(config, turn, turn_count)
        return [
            slot
            for slot in self.available_slots(tenant_id, config, service, date_str)
            if start <= to_minutes(slot) < end
        ]


def turn_labels(turn_count: int) -> list[str]:
    if turn_count <= 0:
        return []
    if turn_count == 1:
        return [TURN_FULL_DAY]
    if turn_count == 2:
        return [TURN_MORNING, TURN_AFTERNOON]
    return [TURN_MORNING, TURN_AFTERNOON, TURN_EVENING]


def canonical_turn(text: str, turn_count: int) -> str | None:
    return find_option(text, turn_labels(turn_count))


def turn_window(config: BusinessConfig, turn: str, turn_count: int) -> tuple[int, int]:
    """
    Minute bounds [start, end) of a turn. The afternoon closes at the evening
    cutoff on 3-turn days and at closing time on 2-turn days.
    """
    open_at = to_minutes(config.start_time)
    close_at = to_minutes(config.end_time)
    midday = to_minutes(config.midday_cutoff)
    evening = to_minutes(config.evening_cutoff)

    label = canonical_turn(turn, turn_count) or turn
    if turn_count >= 2 and label == TURN_MORNING:
        return open_at, midday
    if turn_count == 2 and label == TURN_AFTERNOON:
        return midday, close_at
    if turn_count >= 3 and label == TURN_AFTERNOON:
        return midday, evening
    if turn_count >= 3 and label == TURN_EVENING:
        return evening, close_at
    return open_at, close_at
