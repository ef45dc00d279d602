from __future__ import annotations

from slotbot.application.fsm import messages
from slotbot.application.fsm.base import ConversationContext, HandlerResult, StateHandler
from slotbot.application.fsm.prompts import confirm_again_prompt, times_prompt
from slotbot.application.utils.message_rules import read_confirmation
from slotbot.domain.entities.appointment import BookingRequest
from slotbot.domain.entities.conversation_status import ConversationStatus
from slotbot.domain.entities.outbound_message import TextMessage


class ConfirmationHandler(StateHandler):
    def handle(self, ctx: ConversationContext) -> HandlerResult:
        answer = read_confirmation(ctx.text, messages.CONFIRM_BY_USER, messages.CANCEL_BY_USER)
        if answer is False:
            return HandlerResult(
                new_state=ConversationStatus.IDLE,
                messages=[TextMessage(text=messages.NO_APPOINTMENT_MESSAGE)],
            )

        if answer is None:
            return HandlerResult(
                new_state=ConversationStatus.CONFIRMATION,
                messages=[confirm_again_prompt()],
            )

        memory = ctx.session.memory
        service = self._current_service(ctx)
        if service is None or not memory.date or not memory.time:
            self._logger.warning(
                "Confirmation without a complete selection",
                extra={"tenant_id": ctx.tenant_id, "customer_id": ctx.customer_id},
            )
            return HandlerResult(
                new_state=ConversationStatus.IDLE,
                messages=[TextMessage(text=messages.CONFIRM_PROBLEM_MESSAGE)],
            )

        appointment = self._deps.booking.book_appointment(
            ctx.tenant_id,
            BookingRequest(
                customer_id=ctx.customer_id,
                service_id=service.id,
                service_name=service.name,
                date=memory.date,
                time=memory.time,
                turn=memory.turn,
                customer_name=memory.customer_name,
            ),
        )

        if appointment is None:
            slots = self._slots(ctx, service, memory.date, memory.turn) if memory.turn else []
            return HandlerResult(
                new_state=ConversationStatus.SELECT_TIME,
                messages=[times_prompt(slots, messages.SLOT_TAKEN_MESSAGE, self._deps.max_list_rows)],
                memory_update={"time": None},
            )

        return HandlerResult(
            new_state=ConversationStatus.COMPLETED,
            messages=[
                TextMessage(
                    text=messages.COMPLETED_MESSAGE.format(
                        service_name=appointment.service_name,
                        date=appointment.date,
                        time=appointment.time,
                        folio=appointment.folio,
                    )
                )
            ],
            memory_update={"last_folio": appointment.folio},
        )
