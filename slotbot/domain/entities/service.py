from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Service:
    id: str
    name: str
    duration_minutes: int
    price: float | None = None

    @staticmethod
    def from_dict(data: dict) -> "Service":
        price = data.get("price")
        return Service(
            id=str(data["id"]).strip(),
            name=str(data["name"]).strip(),
            duration_minutes=int(data.get("durationMinutes") or data.get("duration_minutes") or 60),
            price=float(price) if price is not None else None,
        )
