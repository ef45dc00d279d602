from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request, Response
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from slotbot.application.dto.webhook_event import InboundEnvelope, WatiWebhookDTO, WhatsAppWebhookDTO
from slotbot.application.exceptions import TenantResolutionError
from slotbot.application.use_cases.handle_incoming_message import HandleIncomingMessageUseCase
from slotbot.application.use_cases.resolve_tenant import ResolveTenantUseCase
from slotbot.core.config import settings
from slotbot.infrastructure.whatsapp.webhook_verify import verify_post_signature, verify_subscription
from slotbot.wiring.dependencies import get_handle_incoming_message_use_case, get_resolve_tenant_use_case


router = APIRouter()
logger = logging.getLogger(__name__)


def _parse_body(body: bytes) -> Any:
    return json.loads(body.decode("utf-8")) if body else {}


def _dispatch(
    envelopes: list[InboundEnvelope],
    background_tasks: BackgroundTasks,
    resolve_tenant: ResolveTenantUseCase,
    use_case: HandleIncomingMessageUseCase,
) -> None:
    for envelope in envelopes:
        try:
            tenant = resolve_tenant.execute(envelope.channel_number)
        except TenantResolutionError as e:
            logger.warning(
                "Message dropped: tenant not resolved",
                extra={"message_id": envelope.message.id, "reason": str(e)},
            )
            continue
        background_tasks.add_task(use_case.handle, tenant, envelope.message)


@router.post("/webhooks/wati")
async def wati_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    use_case: HandleIncomingMessageUseCase = Depends(get_handle_incoming_message_use_case),
    resolve_tenant: ResolveTenantUseCase = Depends(get_resolve_tenant_use_case),
) -> Response:
    body = await request.body()
    try:
        event = WatiWebhookDTO.model_validate(_parse_body(body))
    except (ValueError, ValidationError):
        logger.exception("Failed to parse WATI webhook body")
        return Response(status_code=400)

    envelopes = event.extract_messages()
    logger.info("Webhook received", extra={"platform": "wati", "message_count": len(envelopes)})
    _dispatch(envelopes, background_tasks, resolve_tenant, use_case)
    return Response(status_code=200)


@router.get("/webhooks/whatsapp")
def verify_whatsapp_webhook(
    hub_mode: str | None = Query(None, alias="hub.mode"),
    hub_verify_token: str | None = Query(None, alias="hub.verify_token"),
    hub_challenge: str | None = Query(None, alias="hub.challenge"),
):
    challenge = verify_subscription(hub_mode, hub_verify_token, hub_challenge, settings.META_VERIFY_TOKEN)
    if challenge is None:
        raise HTTPException(status_code=403, detail="Verification failed")
    return PlainTextResponse(challenge)


@router.post("/webhooks/whatsapp")
async def whatsapp_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    use_case: HandleIncomingMessageUseCase = Depends(get_handle_incoming_message_use_case),
    resolve_tenant: ResolveTenantUseCase = Depends(get_resolve_tenant_use_case),
) -> Response:
    body = await request.body()
    signature = request.headers.get("X-Hub-Signature-256")
    if not verify_post_signature(body, signature, settings.META_APP_SECRET, settings.ENV):
        return Response(status_code=403)

    try:
        event = WhatsAppWebhookDTO.model_validate(_parse_body(body))
    except (ValueError, ValidationError):
        logger.exception("Failed to parse WhatsApp webhook body")
        return Response(status_code=400)

    envelopes = event.extract_messages()
    logger.info("Webhook received", extra={"platform": "whatsapp", "message_count": len(envelopes)})
    _dispatch(envelopes, background_tasks, resolve_tenant, use_case)
    return Response(status_code=200)
