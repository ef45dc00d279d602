from __future__ import annotations

import logging
from typing import Any

import httpx


class WhatsAppCloudClient:
    def __init__(
        self,
        access_token: str,
        phone_number_id: str,
        api_version: str = "v21.0",
        client: httpx.Client | None = None,
    ) -> None:
        self._access_token = access_token
        self._endpoint = f"https://graph.facebook.com/{api_version}/{phone_number_id}/messages"
        self._client = client or httpx.Client(timeout=10.0)
        self._logger = logging.getLogger(__name__)

    def send(self, payload: dict[str, Any]) -> None:
        headers = {"Authorization": f"Bearer {self._access_token}"}
        resp = self._client.post(self._endpoint, headers=headers, json=payload)
        if resp.status_code >= 400:
            try:
                error = resp.json().get("error", {})
                error_code = error.get("code")
                error_message = error.get("message")
            except Exception:
                error_code = None
                error_message = resp.text

            self._logger.error(
                "WhatsApp send failed",
                extra={
                    "status": resp.status_code,
                    "error_code": error_code,
                    "reason": error_message,
                    "customer_id": payload.get("to"),
                    "message_type": payload.get("type"),
                },
            )
            resp.raise_for_status()
