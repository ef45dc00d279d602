from __future__ import annotations

from typing import Any

# Demo tenant used when no TENANTS_FILE is configured. Same shape as the file.
DEFAULT_TENANTS: list[dict[str, Any]] = [
    {
        "id": "default-business",
        "name": "Estética Demo",
        "phone": "5215500000000",
        "platform": "wati",
        "config": {
            "workDays": [1, 2, 3, 4, 5, 6],
            "startTime": "09:00",
            "endTime": "20:00",
            "maxDaysFuture": 14,
            "maxTurnsPerDay": {"0": 0, "1": 3, "2": 3, "3": 3, "4": 3, "5": 3, "6": 1},
            "holidays": [],
            "timezone": "America/Mexico_City",
        },
        "services": [
            {"id": "srv-1", "name": "Manicura", "durationMinutes": 30, "price": 200},
            {"id": "srv-2", "name": "Pedicura", "durationMinutes": 45, "price": 300},
            {"id": "srv-3", "name": "Corte de cabello", "durationMinutes": 60, "price": 250},
        ],
    }
]
