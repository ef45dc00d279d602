from __future__ import annotations

from slotbot.application.fsm import messages
from slotbot.application.fsm.base import ConversationContext, HandlerResult, StateHandler
from slotbot.application.fsm.prompts import days_prompt
from slotbot.application.utils.message_rules import find_option, same_option
from slotbot.domain.entities.conversation_status import ConversationStatus


class SelectDayHandler(StateHandler):
    def handle(self, ctx: ConversationContext) -> HandlerResult:
        if same_option(ctx.text, messages.BACK_TO_SERVICE):
            return self._to_services(ctx)

        service = self._current_service(ctx)
        if service is None:
            return self._to_services(ctx)

        days = self._days(ctx, service)
        day = find_option(ctx.text, days)
        if day is None:
            if not days:
                return self._to_services(ctx, messages.NO_DAYS_MESSAGE.format(service_name=service.name))
            return HandlerResult(
                new_state=ConversationStatus.SELECT_DAY,
                messages=[days_prompt(days, messages.ASK_DAY_AGAIN_MESSAGE, self._deps.max_list_rows)],
            )

        return self._to_turns(ctx, service, day)
