from __future__ import annotations

from slotbot.application.fsm.base import ConversationContext, HandlerResult, StateHandler
from slotbot.domain.entities.conversation_status import ConversationStatus


class HumanSupportHandler(StateHandler):
    """A person has taken over the conversation: the bot answers nothing."""

    def handle(self, ctx: ConversationContext) -> HandlerResult:
        return HandlerResult(new_state=ConversationStatus.HUMAN_SUPPORT)
