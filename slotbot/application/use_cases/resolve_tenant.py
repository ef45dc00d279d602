from __future__ import annotations

import logging

from slotbot.application.exceptions import TenantResolutionError
from slotbot.application.ports.tenant_directory import TenantDirectoryPort
from slotbot.domain.entities.tenant import TenantInfo


class ResolveTenantUseCase:
    """Channel number -> tenant, falling back to the configured default tenant."""

    def __init__(self, directory: TenantDirectoryPort, default_tenant_id: str | None = None) -> None:
        self._directory = directory
        self._default_tenant_id = default_tenant_id
        self._logger = logging.getLogger(__name__)

    def execute(self, channel_number: str | None) -> TenantInfo:
        tenant = self._directory.resolve(channel_number)
        if tenant is not None:
            return tenant

        if self._default_tenant_id:
            tenant = self._directory.resolve(self._default_tenant_id)
            if tenant is not None:
                self._logger.info(
                    "Using default tenant",
                    extra={"tenant_id": tenant.tenant_id, "reason": channel_number or "no channel number"},
                )
                return tenant

        raise TenantResolutionError(f"No tenant for channel number {channel_number!r}")
