from __future__ import annotations

from slotbot.application.fsm import messages
from slotbot.application.fsm.base import ConversationContext, HandlerResult, StateHandler
from slotbot.application.fsm.prompts import confirmation_prompt, name_prompt
from slotbot.application.utils.message_rules import same_option
from slotbot.domain.entities.conversation_status import ConversationStatus
from slotbot.domain.entities.outbound_message import TextMessage

MIN_NAME_LENGTH = 3


class CollectNameHandler(StateHandler):
    def handle(self, ctx: ConversationContext) -> HandlerResult:
        name = " ".join(ctx.text.split())
        memory = ctx.session.memory

        if same_option(name, messages.CANCEL_PROCESS):
            return HandlerResult(
                new_state=ConversationStatus.IDLE,
                messages=[TextMessage(text=messages.NO_APPOINTMENT_MESSAGE)],
            )

        if same_option(name, messages.BACK_TO_TIME):
            service = self._current_service(ctx)
            if service is None or not memory.date or not memory.turn:
                return self._resume(ctx)
            return self._to_times(ctx, service, memory.date, memory.turn, messages.ASK_TIME_AGAIN_MESSAGE)

        if len(name) < MIN_NAME_LENGTH:
            return HandlerResult(
                new_state=ConversationStatus.COLLECT_NAME,
                messages=[name_prompt(messages.ASK_NAME_AGAIN_MESSAGE)],
            )

        return HandlerResult(
            new_state=ConversationStatus.CONFIRMATION,
            messages=[confirmation_prompt(memory, name)],
            memory_update={"customer_name": name},
        )
