from __future__ import annotations

from dataclasses import dataclass

from slotbot.domain.entities.business_config import BusinessConfig
from slotbot.domain.entities.service import Service


@dataclass(frozen=True)
class TenantInfo:
    tenant_id: str
    platform: str


@dataclass(frozen=True)
class Tenant:
    id: str
    name: str
    phone: str
    platform: str
    config: BusinessConfig
    services: tuple[Service, ...] = ()
