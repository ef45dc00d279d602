from __future__ import annotations

import logging
from typing import Any

import httpx


class WatiClient:
    def __init__(self, api_url: str, api_token: str, client: httpx.Client | None = None) -> None:
        self._api_url = api_url.rstrip("/")
        self._api_token = api_token
        self._client = client or httpx.Client(timeout=10.0)
        self._logger = logging.getLogger(__name__)

    def send_session_message(self, wa_id: str, text: str) -> None:
        self._post(f"/api/v1/sendSessionMessage/{wa_id}", {"messageText": text}, wa_id)

    def send_interactive_buttons(self, wa_id: str, body: dict[str, Any]) -> None:
        self._post(f"/api/v1/sendInteractiveButtonsMessage/{wa_id}", body, wa_id)

    def send_interactive_list(self, wa_id: str, body: dict[str, Any]) -> None:
        self._post(f"/api/v1/sendInteractiveListMessage/{wa_id}", body, wa_id)

    def _post(self, path: str, body: dict[str, Any], wa_id: str) -> None:
        headers = {"Authorization": f"Bearer {self._api_token}"}
        resp = self._client.post(f"{self._api_url}{path}", headers=headers, json=body)
        if resp.status_code >= 400:
            self._logger.error(
                "WATI send failed",
                extra={"status": resp.status_code, "reason": resp.text[:300], "customer_id": wa_id},
            )
            resp.raise_for_status()
