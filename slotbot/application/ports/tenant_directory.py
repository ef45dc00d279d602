from __future__ import annotations

from abc import ABC, abstractmethod

from slotbot.domain.entities.business_config import BusinessConfig
from slotbot.domain.entities.service import Service
from slotbot.domain.entities.tenant import TenantInfo


class TenantDirectoryPort(ABC):
    @abstractmethod
    def resolve(self, channel_number: str | None) -> TenantInfo | None:
        """Map the business phone / channel id a webhook was delivered to onto a tenant."""
        raise NotImplementedError

    @abstractmethod
    def get_config(self, tenant_id: str) -> BusinessConfig:
        raise NotImplementedError

    @abstractmethod
    def list_services(self, tenant_id: str) -> list[Service]:
        raise NotImplementedError

    @abstractmethod
    def get_service(self, tenant_id: str, service_id: str | None) -> Service | None:
        raise NotImplementedError
