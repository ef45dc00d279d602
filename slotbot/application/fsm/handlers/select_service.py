from __future__ import annotations

from dataclasses import replace

from slotbot.application.fsm import messages
from slotbot.application.fsm.base import ConversationContext, HandlerResult, StateHandler, match_service


class SelectServiceHandler(StateHandler):
    def handle(self, ctx: ConversationContext) -> HandlerResult:
        service = match_service(ctx.text, self._services(ctx))
        if service is None:
            return self._to_services(ctx, messages.NO_SERVICE_MESSAGE)

        # Recorded even when no day is bookable and the service list is shown again
        result = self._to_days(ctx, service)
        return replace(
            result,
            memory_update={
                **(result.memory_update or {}),
                "service_id": service.id,
                "service_name": service.name,
                "customer_name": None,
            },
        )
