from __future__ import annotations

from slotbot.application.fsm import messages
from slotbot.application.fsm.base import ConversationContext, HandlerResult, StateHandler
from slotbot.application.fsm.prompts import turns_prompt
from slotbot.application.utils.message_rules import find_option, same_option
from slotbot.domain.entities.conversation_status import ConversationStatus


class SelectTurnHandler(StateHandler):
    def handle(self, ctx: ConversationContext) -> HandlerResult:
        service = self._current_service(ctx)
        day = ctx.session.memory.date
        if service is None or not day:
            return self._resume(ctx)

        if same_option(ctx.text, messages.BACK_TO_DAY):
            return self._to_days(ctx, service, messages.ASK_DAY_AGAIN_MESSAGE)

        turns = self._turns(ctx, service, day)
        turn = find_option(ctx.text, turns)
        if turn is None:
            if not turns:
                return self._to_days(ctx, service, messages.ASK_DAY_AGAIN_MESSAGE)
            return HandlerResult(
                new_state=ConversationStatus.SELECT_TURN,
                messages=[turns_prompt(turns, messages.ASK_TURN_MESSAGE, self._deps.max_list_rows)],
            )

        return self._to_times(ctx, service, day, turn)
