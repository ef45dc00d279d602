from __future__ import annotations

import re
from datetime import date, datetime
from zoneinfo import ZoneInfo


def to_minutes(hhmm: str) -> int:
    hours, minutes = hhmm.strip().split(":", 1)
    return int(hours) * 60 + int(minutes)


def to_hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def enumerate_slots(start_time: str, end_time: str, duration_minutes: int) -> list[str]:
    """
    Start times from start_time stepping by duration_minutes.
    A slot is kept only if it also ends by end_time, so a start at (or running past) closing is excluded.
    """
    if duration_minutes <= 0:
        raise ValueError("duration_minutes must be positive")

    slots: list[str] = []
    current = to_minutes(start_time)
    end = to_minutes(end_time)
    while current + duration_minutes <= end:
        slots.append(to_hhmm(current))
        current += duration_minutes
    return slots


def weekday_index(day: date) -> int:
    """Sunday=0 ... Saturday=6."""
    return int(day.strftime("%w"))


def parse_iso_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


def local_today(timezone: str) -> date:
    return datetime.now(safe_timezone(timezone)).date()


def safe_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except Exception:
        return ZoneInfo("UTC")


def normalize_hhmm(text: str) -> str | None:
    """'9:00' -> '09:00'. None if the text is not a clock time."""
    match = re.fullmatch(r"\s*(\d{1,2}):(\d{2})\s*(?:hrs?|h)?\.?\s*", text or "", re.IGNORECASE)
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        return None
    return f"{hours:02d}:{minutes:02d}"
