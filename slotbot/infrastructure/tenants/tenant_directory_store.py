from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from slotbot.application.exceptions import TenantResolutionError
from slotbot.application.ports.tenant_directory import TenantDirectoryPort
from slotbot.domain.entities.business_config import BusinessConfig
from slotbot.domain.entities.service import Service
from slotbot.domain.entities.tenant import Tenant, TenantInfo
from slotbot.infrastructure.tenants.tenant_data import DEFAULT_TENANTS


class TenantDirectoryStore(TenantDirectoryPort):
    def __init__(self, tenants: list[dict[str, Any]] | None = None) -> None:
        self._tenants: dict[str, Tenant] = {}
        self._by_phone: dict[str, str] = {}
        for raw in tenants if tenants is not None else DEFAULT_TENANTS:
            tenant = _build_tenant(raw)
            self._tenants[tenant.id] = tenant
            if tenant.phone:
                self._by_phone[_digits(tenant.phone)] = tenant.id
        self._logger = logging.getLogger(__name__)

    @classmethod
    def from_file(cls, path: str) -> "TenantDirectoryStore":
        with open(Path(path), "r", encoding="utf-8") as f:
            data = json.load(f)
        if isinstance(data, dict):
            data = data.get("tenants", [])
        return cls(tenants=list(data))

    def resolve(self, channel_number: str | None) -> TenantInfo | None:
        if not channel_number:
            return None
        tenant_id = self._by_phone.get(_digits(channel_number)) or (
            channel_number if channel_number in self._tenants else None
        )
        if tenant_id is None:
            self._logger.warning("No tenant for channel number", extra={"reason": channel_number})
            return None
        tenant = self._tenants[tenant_id]
        return TenantInfo(tenant_id=tenant.id, platform=tenant.platform)

    def get_tenant(self, tenant_id: str) -> Tenant:
        tenant = self._tenants.get(tenant_id)
        if tenant is None:
            raise TenantResolutionError(f"Unknown tenant {tenant_id!r}")
        return tenant

    def get_config(self, tenant_id: str) -> BusinessConfig:
        return self.get_tenant(tenant_id).config

    def list_services(self, tenant_id: str) -> list[Service]:
        return list(self.get_tenant(tenant_id).services)

    def get_service(self, tenant_id: str, service_id: str | None) -> Service | None:
        if not service_id:
            return None
        for service in self.get_tenant(tenant_id).services:
            if service.id == service_id:
                return service
        return None


def _build_tenant(raw: dict[str, Any]) -> Tenant:
    return Tenant(
        id=str(raw["id"]),
        name=str(raw.get("name") or raw["id"]),
        phone=str(raw.get("phone") or ""),
        platform=str(raw.get("platform") or "wati"),
        config=BusinessConfig.from_dict(raw.get("config") or {}),
        services=tuple(Service.from_dict(s) for s in raw.get("services") or ()),
    )


def _digits(value: str) -> str:
    return "".join(ch for ch in value if ch.isdigit()) or value
