from __future__ import annotations

from slotbot.application.fsm import messages
from slotbot.application.fsm.base import ConversationContext, HandlerResult, StateHandler
from slotbot.application.fsm.prompts import name_prompt
from slotbot.application.utils.message_rules import find_option, same_option
from slotbot.application.utils.slot_times import normalize_hhmm
from slotbot.domain.entities.conversation_status import ConversationStatus


class SelectTimeHandler(StateHandler):
    def handle(self, ctx: ConversationContext) -> HandlerResult:
        memory = ctx.session.memory
        service = self._current_service(ctx)
        if service is None or not memory.date or not memory.turn:
            return self._resume(ctx)

        if same_option(ctx.text, messages.BACK_TO_TIME):
            return self._to_times(ctx, service, memory.date, memory.turn, messages.ASK_TIME_AGAIN_MESSAGE)

        slots = self._slots(ctx, service, memory.date, memory.turn)
        choice = find_option(normalize_hhmm(ctx.text) or ctx.text, slots)
        if choice is None:
            return self._to_times(ctx, service, memory.date, memory.turn, messages.ASK_TIME_AGAIN_MESSAGE)

        return HandlerResult(
            new_state=ConversationStatus.COLLECT_NAME,
            messages=[name_prompt()],
            memory_update={"time": choice, "customer_name": None},
        )
