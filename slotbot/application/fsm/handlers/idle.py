from __future__ import annotations

from slotbot.application.fsm import messages
from slotbot.application.fsm.base import ConversationContext, HandlerResult, StateHandler
from slotbot.application.fsm.prompts import services_prompt
from slotbot.application.utils.message_rules import extract_folio
from slotbot.domain.entities.conversation_status import ConversationStatus
from slotbot.domain.entities.intent import Intent
from slotbot.domain.entities.outbound_message import TextMessage


class IdleHandler(StateHandler):
    """Entry point of a conversation; also serves COMPLETED and CANCELLED."""

    def handle(self, ctx: ConversationContext) -> HandlerResult:
        routed = self.route_intent(ctx)
        if routed is not None:
            return routed

        return HandlerResult(
            new_state=ConversationStatus.AGENT_CLASSIFIER,
            messages=[
                TextMessage(text=messages.WELCOME_MESSAGE),
                services_prompt(self._services(ctx), messages.ASK_SERVICE_MESSAGE, self._deps.max_list_rows),
            ],
        )

    def route_intent(self, ctx: ConversationContext) -> HandlerResult | None:
        """
        Act on a classified intent.
        Greetings, FAQ questions and unclassified text return None and are answered by the caller.
        """
        intent = ctx.intent
        if intent == Intent.CANCEL_APPOINTMENT.value:
            return self.cancel_by_folio(ctx)

        if intent == Intent.APPOINTMENT.value:
            return self._to_services(ctx)

        if intent == Intent.RESCHEDULE.value:
            return self._to_services(ctx, messages.RESCHEDULE_MESSAGE)

        if intent == Intent.CONFIRMATION.value:
            folio = ctx.session.memory.last_folio
            if ctx.session.state == ConversationStatus.COMPLETED and folio:
                return HandlerResult(
                    new_state=ConversationStatus.COMPLETED,
                    messages=[TextMessage(text=messages.BOOKING_ON_RECORD_MESSAGE.format(folio=folio))],
                )
            return self._to_services(ctx)

        if intent == Intent.SUPPORT.value:
            self._logger.info(
                "Conversation handed to a human agent",
                extra={"tenant_id": ctx.tenant_id, "customer_id": ctx.customer_id},
            )
            return HandlerResult(
                new_state=ConversationStatus.HUMAN_SUPPORT,
                messages=[TextMessage(text=messages.SUPPORT_HANDOFF_MESSAGE)],
            )

        if intent == Intent.PROMOTIONS.value:
            return HandlerResult(
                new_state=ConversationStatus.AGENT_CLASSIFIER,
                messages=[
                    services_prompt(self._services(ctx), messages.PROMOTIONS_MESSAGE, self._deps.max_list_rows),
                ],
            )

        return None

    def cancel_by_folio(self, ctx: ConversationContext) -> HandlerResult:
        folio = extract_folio(ctx.text) or ctx.session.memory.last_folio
        if not folio:
            return HandlerResult(
                new_state=ConversationStatus.IDLE,
                messages=[TextMessage(text=messages.ASK_FOLIO_MESSAGE)],
            )

        appointment = self._deps.booking.cancel_appointment(ctx.tenant_id, ctx.customer_id, folio)
        if appointment is None:
            self._logger.info(
                "Nothing to cancel",
                extra={"tenant_id": ctx.tenant_id, "customer_id": ctx.customer_id, "folio": folio},
            )
            return HandlerResult(
                new_state=ConversationStatus.IDLE,
                messages=[TextMessage(text=messages.APPOINTMENT_NOT_FOUND_MESSAGE.format(folio=folio))],
            )

        return HandlerResult(
            new_state=ConversationStatus.CANCELLED,
            messages=[
                TextMessage(
                    text=messages.APPOINTMENT_CANCELLED_MESSAGE.format(
                        folio=appointment.folio,
                        date=appointment.date,
                        time=appointment.time,
                    )
                )
            ],
            memory_update={"last_folio": None},
        )
