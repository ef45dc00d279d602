from __future__ import annotations

from slotbot.application.fsm import messages
from slotbot.application.fsm.base import (
    ConversationContext,
    FlowDependencies,
    HandlerResult,
    StateHandler,
    match_service,
)
from slotbot.application.fsm.handlers.idle import IdleHandler
from slotbot.application.fsm.handlers.select_service import SelectServiceHandler
from slotbot.application.fsm.prompts import services_prompt
from slotbot.domain.entities.conversation_status import ConversationStatus
from slotbot.domain.entities.intent import Intent
from slotbot.domain.entities.outbound_message import TextMessage


class AgentClassifierHandler(StateHandler):
    """Triage after the welcome message: route classified intents, otherwise answer with the FAQ fallback."""

    def __init__(self, deps: FlowDependencies) -> None:
        super().__init__(deps)
        self._select_service = SelectServiceHandler(deps)
        self._idle = IdleHandler(deps)

    def handle(self, ctx: ConversationContext) -> HandlerResult:
        services = self._services(ctx)
        if match_service(ctx.text, services) is not None:
            return self._select_service.handle(ctx)

        routed = self._idle.route_intent(ctx)
        if routed is not None:
            return routed

        text = messages.WELCOME_MESSAGE if ctx.intent == Intent.GREETING.value else messages.FAQ_FALLBACK_MESSAGE
        return HandlerResult(
            new_state=ConversationStatus.AGENT_CLASSIFIER,
            messages=[
                TextMessage(text=text),
                services_prompt(services, messages.ASK_SERVICE_MESSAGE, self._deps.max_list_rows),
            ],
        )
