from __future__ import annotations

import logging
import time
from typing import Callable

from slotbot.application.exceptions import LLMContractError, LLMUpstreamError
from slotbot.application.fsm.base import ConversationContext
from slotbot.application.fsm.orchestrator import ConversationOrchestrator
from slotbot.application.ports.session_store import SessionStorePort
from slotbot.application.use_cases.classify_intent import ClassifyIntentUseCase
from slotbot.application.use_cases.send_reply import SendReplyUseCase
from slotbot.domain.entities.conversation_status import ConversationStatus
from slotbot.domain.entities.message import InboundMessage
from slotbot.domain.entities.session import new_session
from slotbot.domain.entities.tenant import TenantInfo

# Free-text states where the customer is not answering a booking prompt
CLASSIFIED_STATES = frozenset(
    {
        ConversationStatus.IDLE,
        ConversationStatus.COMPLETED,
        ConversationStatus.CANCELLED,
        ConversationStatus.AGENT_CLASSIFIER,
    }
)


class HandleIncomingMessageUseCase:
    def __init__(
        self,
        sessions: SessionStorePort,
        orchestrator: ConversationOrchestrator,
        classify_intent: ClassifyIntentUseCase,
        send_reply: SendReplyUseCase,
        session_ttl_seconds: float = 3600.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._sessions = sessions
        self._orchestrator = orchestrator
        self._classify_intent = classify_intent
        self._send_reply = send_reply
        self._session_ttl_seconds = session_ttl_seconds
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    def handle(self, tenant: TenantInfo, message: InboundMessage) -> None:
        try:
            if message.id:
                if self._sessions.has_processed(tenant.tenant_id, message.id):
                    self._logger.info(
                        "Duplicate message skipped",
                        extra={"tenant_id": tenant.tenant_id, "message_id": message.id},
                    )
                    return
                self._sessions.mark_processed(tenant.tenant_id, message.id)

            session = self._sessions.get_session(tenant.tenant_id, message.customer_id)
            if session is None:
                session = new_session(
                    tenant.tenant_id,
                    message.customer_id,
                    now_ts=self._clock(),
                    ttl_seconds=self._session_ttl_seconds,
                )

            # A person is answering; the session is not touched so the handoff ends when it expires
            if session.state == ConversationStatus.HUMAN_SUPPORT:
                self._logger.info(
                    "Human support active, bot stays silent",
                    extra={"tenant_id": tenant.tenant_id, "customer_id": message.customer_id, "message_id": message.id},
                )
                return

            intent = self._detect_intent(tenant.tenant_id, message, session.state)

            outcome = self._orchestrator.process(
                ConversationContext(
                    tenant_id=tenant.tenant_id,
                    platform=tenant.platform,
                    customer_id=message.customer_id,
                    session=session,
                    text=message.text,
                    intent=intent,
                )
            )

            for reply in outcome.result.messages:
                self._send_reply.execute(tenant.platform, message.customer_id, reply)

            self._logger.info(
                "Message handled",
                extra={
                    "tenant_id": tenant.tenant_id,
                    "customer_id": message.customer_id,
                    "message_id": message.id,
                    "new_state": outcome.session.state.value,
                },
            )
        except Exception as e:
            self._logger.exception(
                "Failed to handle incoming message",
                extra={"tenant_id": tenant.tenant_id, "message_id": message.id, "reason": str(e)},
            )

    def _detect_intent(self, tenant_id: str, message: InboundMessage, state: ConversationStatus) -> str | None:
        if state not in CLASSIFIED_STATES or not message.text:
            return None
        try:
            classification = self._classify_intent.execute(message.text)
        except (LLMUpstreamError, LLMContractError) as e:
            self._logger.warning(
                "Intent classification failed",
                extra={"tenant_id": tenant_id, "message_id": message.id, "reason": str(e)},
            )
            return None
        self._logger.info("Intent classified", extra={"tenant_id": tenant_id, "intent": classification.intent})
        return classification.intent
