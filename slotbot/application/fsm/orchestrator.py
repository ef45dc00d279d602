from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from typing import Callable, Mapping

from slotbot.application.fsm import messages
from slotbot.application.fsm.base import ConversationContext, FlowDependencies, HandlerResult, StateHandler
from slotbot.application.fsm.handlers.agent_classifier import AgentClassifierHandler
from slotbot.application.fsm.handlers.collect_name import CollectNameHandler
from slotbot.application.fsm.handlers.confirmation import ConfirmationHandler
from slotbot.application.fsm.handlers.human_support import HumanSupportHandler
from slotbot.application.fsm.handlers.idle import IdleHandler
from slotbot.application.fsm.handlers.select_day import SelectDayHandler
from slotbot.application.fsm.handlers.select_service import SelectServiceHandler
from slotbot.application.fsm.handlers.select_time import SelectTimeHandler
from slotbot.application.fsm.handlers.select_turn import SelectTurnHandler
from slotbot.application.ports.session_store import SessionStorePort
from slotbot.domain.entities.conversation_status import ConversationStatus
from slotbot.domain.entities.outbound_message import TextMessage
from slotbot.domain.entities.session import Session


@dataclass(frozen=True)
class TurnOutcome:
    result: HandlerResult
    session: Session


def build_state_handlers(deps: FlowDependencies) -> dict[ConversationStatus, StateHandler]:
    idle = IdleHandler(deps)
    return {
        ConversationStatus.IDLE: idle,
        ConversationStatus.COMPLETED: idle,
        ConversationStatus.CANCELLED: idle,
        ConversationStatus.AGENT_CLASSIFIER: AgentClassifierHandler(deps),
        ConversationStatus.HUMAN_SUPPORT: HumanSupportHandler(deps),
        ConversationStatus.SELECT_SERVICE: SelectServiceHandler(deps),
        ConversationStatus.SELECT_DAY: SelectDayHandler(deps),
        ConversationStatus.SELECT_TURN: SelectTurnHandler(deps),
        ConversationStatus.SELECT_TIME: SelectTimeHandler(deps),
        ConversationStatus.COLLECT_NAME: CollectNameHandler(deps),
        ConversationStatus.CONFIRMATION: ConfirmationHandler(deps),
    }


class ConversationOrchestrator:
    """
    Runs one customer message through the handler of the session's state.

    The handler result is applied to the session (state overwrite, shallow
    memory merge, TTL refresh) and the session is persisted before the
    messages are returned. A failing handler never propagates: the customer
    gets an apology and the session drops back to IDLE with its memory kept.
    """

    def __init__(
        self,
        handlers: Mapping[ConversationStatus, StateHandler],
        sessions: SessionStorePort,
        session_ttl_seconds: float = 3600.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        missing = [status.value for status in ConversationStatus if status not in handlers]
        if missing:
            raise ValueError(f"No handler registered for states: {', '.join(missing)}")
        self._handlers = dict(handlers)
        self._sessions = sessions
        self._session_ttl_seconds = session_ttl_seconds
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    def process(self, ctx: ConversationContext) -> TurnOutcome:
        session = ctx.session
        now_ts = self._clock()

        try:
            result = self._handlers[session.state].handle(ctx)
            updated = self._apply(session, result, now_ts)
        except Exception:
            self._logger.exception(
                "State handler failed",
                extra={"tenant_id": ctx.tenant_id, "customer_id": ctx.customer_id, "state": session.state.value},
            )
            result = HandlerResult(
                new_state=ConversationStatus.IDLE,
                messages=[TextMessage(text=messages.FLOW_ERROR_MESSAGE)],
            )
            updated = self._apply(session, result, now_ts)

        self._sessions.save_session(updated)

        if updated.state != session.state:
            self._logger.info(
                "State transition",
                extra={
                    "tenant_id": ctx.tenant_id,
                    "customer_id": ctx.customer_id,
                    "state": session.state.value,
                    "new_state": updated.state.value,
                },
            )
        return TurnOutcome(result=result, session=updated)

    def _apply(self, session: Session, result: HandlerResult, now_ts: float) -> Session:
        memory = session.memory
        if result.memory_update:
            memory = replace(memory, **result.memory_update)
        return replace(
            session,
            state=result.new_state,
            memory=memory,
            expires_at=now_ts + self._session_ttl_seconds,
            updated_at=now_ts,
        )
