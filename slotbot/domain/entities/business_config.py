from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class BusinessConfig:
    """
    Working-hours configuration of a tenant.

    Weekdays are numbered Sunday=0 ... Saturday=6. Times are local
    wall-clock "HH:MM" strings, dates are "YYYY-MM-DD".
    """

    work_days: tuple[int, ...] = (1, 2, 3, 4, 5)
    start_time: str = "09:00"
    end_time: str = "18:00"
    max_days_future: int = 7
    max_turns_per_day: dict[int, int] = field(default_factory=dict)
    holidays: frozenset[str] = frozenset()
    timezone: str = "America/Mexico_City"
    midday_cutoff: str = "13:00"
    evening_cutoff: str = "18:00"

    def turns_for_weekday(self, weekday: int) -> int:
        # Unconfigured weekdays behave as single-turn days
        return int(self.max_turns_per_day.get(weekday, 1))

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "BusinessConfig":
        turns_raw = data.get("maxTurnsPerDay") or data.get("max_turns_per_day") or {}
        if isinstance(turns_raw, list):
            turns = {day: int(count) for day, count in enumerate(turns_raw)}
        else:
            turns = {int(day): int(count) for day, count in turns_raw.items()}

        return BusinessConfig(
            work_days=tuple(int(d) for d in data.get("workDays", data.get("work_days", (1, 2, 3, 4, 5)))),
            start_time=str(data.get("startTime") or data.get("start_time") or "09:00"),
            end_time=str(data.get("endTime") or data.get("end_time") or "18:00"),
            max_days_future=int(data.get("maxDaysFuture", data.get("max_days_future", 7))),
            max_turns_per_day=turns,
            holidays=frozenset(str(h) for h in data.get("holidays") or ()),
            timezone=str(data.get("timezone") or "America/Mexico_City"),
            midday_cutoff=str(data.get("middayCutoff") or data.get("midday_cutoff") or "13:00"),
            evening_cutoff=str(data.get("eveningCutoff") or data.get("evening_cutoff") or "18:00"),
        )
