"""
Tests for the booking conversation: per-state handlers and the orchestrator.
"""

from __future__ import annotations

import re
from unittest.mock import MagicMock

import pytest

from conftest import CUSTOMER_ID, TENANT_ID, make_context, make_session

from slotbot.application.fsm import messages
from slotbot.application.fsm.base import FlowDependencies, HandlerResult, StateHandler
from slotbot.application.fsm.orchestrator import ConversationOrchestrator, build_state_handlers
from slotbot.application.ports.booking_ledger import slot_lock_key
from slotbot.application.use_cases.availability import AvailabilityCalculator
from slotbot.domain.entities.conversation_status import ConversationStatus
from slotbot.domain.entities.intent import Intent
from slotbot.domain.entities.outbound_message import ButtonsMessage, ListMessage, TextMessage

S = ConversationStatus


def _rows(message) -> list[str]:
    assert isinstance(message, ListMessage)
    return [row.title for row in message.rows]


def _picked(**memory):
    base = dict(service_id="srv-1", service_name="Manicura")
    base.update(memory)
    return base


def test_idle_with_appointment_intent_lists_services(orchestrator):
    outcome = orchestrator.process(make_context(make_session(), "quiero una cita", Intent.APPOINTMENT.value))

    assert outcome.session.state == S.SELECT_SERVICE
    assert _rows(outcome.result.messages[0]) == ["Manicura", "Pedicura"]


def test_idle_without_appointment_intent_goes_to_triage(orchestrator):
    outcome = orchestrator.process(make_context(make_session(), "hola", Intent.GREETING.value))

    assert outcome.session.state == S.AGENT_CLASSIFIER
    assert outcome.result.messages[0] == TextMessage(text=messages.WELCOME_MESSAGE)
    assert _rows(outcome.result.messages[1]) == ["Manicura", "Pedicura"]


def test_triage_reenters_flow_on_service_choice(orchestrator):
    outcome = orchestrator.process(make_context(make_session(S.AGENT_CLASSIFIER), "manicura", Intent.FAQ.value))

    assert outcome.session.state == S.SELECT_DAY
    assert outcome.session.memory.service_id == "srv-1"


def test_triage_answers_other_questions_with_fallback(orchestrator):
    outcome = orchestrator.process(
        make_context(make_session(S.AGENT_CLASSIFIER), "¿dónde están ubicados?", Intent.FAQ.value)
    )

    assert outcome.session.state == S.AGENT_CLASSIFIER
    assert outcome.result.messages[0].text == messages.FAQ_FALLBACK_MESSAGE


def test_select_service_match_records_service_and_lists_days(orchestrator):
    """'Manicura' in SELECT_SERVICE moves to SELECT_DAY with serviceId srv-1."""
    outcome = orchestrator.process(make_context(make_session(S.SELECT_SERVICE), "Manicura"))

    assert outcome.session.state == S.SELECT_DAY
    assert outcome.session.memory.service_id == "srv-1"
    assert outcome.session.memory.service_name == "Manicura"
    assert _rows(outcome.result.messages[0]) == [
        "2024-05-23",
        "2024-05-24",
        "2024-05-27",
        "2024-05-28",
        "2024-05-29",
    ]


def test_select_service_no_match_reprompts(orchestrator):
    outcome = orchestrator.process(make_context(make_session(S.SELECT_SERVICE), "masaje"))

    assert outcome.session.state == S.SELECT_SERVICE
    assert outcome.session.memory.service_id is None
    assert outcome.result.messages[0].text == messages.NO_SERVICE_MESSAGE
    assert _rows(outcome.result.messages[0]) == ["Manicura", "Pedicura"]


def test_select_service_without_days_records_service_and_relists(deps, store, clock):
    availability = MagicMock(spec=AvailabilityCalculator)
    availability.available_days.return_value = []
    no_days = FlowDependencies(tenants=deps.tenants, availability=availability, booking=deps.booking, today=deps.today)
    orchestrator = ConversationOrchestrator(build_state_handlers(no_days), store, 3600, clock)

    outcome = orchestrator.process(make_context(make_session(S.SELECT_SERVICE), "Pedicura"))

    assert outcome.session.state == S.SELECT_SERVICE
    assert outcome.session.memory.service_id == "srv-2"
    assert outcome.session.memory.service_name == "Pedicura"
    assert outcome.result.messages[0].text == messages.NO_DAYS_MESSAGE.format(service_name="Pedicura")
    assert _rows(outcome.result.messages[0]) == ["Manicura", "Pedicura"]


def test_day_list_is_capped(deps, store, clock):
    """Only the first rows are presented; the full list is still accepted."""
    capped = FlowDependencies(
        tenants=deps.tenants,
        availability=deps.availability,
        booking=deps.booking,
        max_list_rows=2,
        today=deps.today,
    )
    orchestrator = ConversationOrchestrator(build_state_handlers(capped), store, 3600, clock)

    listed = orchestrator.process(make_context(make_session(S.SELECT_SERVICE), "Manicura"))
    chosen = orchestrator.process(make_context(make_session(S.SELECT_DAY, **_picked()), "2024-05-29"))

    assert _rows(listed.result.messages[0]) == ["2024-05-23", "2024-05-24"]
    assert chosen.session.state == S.SELECT_TURN


def test_select_day_valid_choice_moves_to_turns(orchestrator):
    outcome = orchestrator.process(make_context(make_session(S.SELECT_DAY, **_picked()), "2024-05-23"))

    assert outcome.session.state == S.SELECT_TURN
    assert outcome.session.memory.date == "2024-05-23"
    assert _rows(outcome.result.messages[0]) == ["Matutino", "Vespertino"]


def test_select_day_rejects_unavailable_day(orchestrator):
    """Saturday is not a work day."""
    outcome = orchestrator.process(make_context(make_session(S.SELECT_DAY, **_picked()), "2024-05-25"))

    assert outcome.session.state == S.SELECT_DAY
    assert outcome.session.memory.date is None
    assert outcome.result.messages[0].text == messages.ASK_DAY_AGAIN_MESSAGE


def test_select_day_back_to_services(orchestrator):
    outcome = orchestrator.process(
        make_context(make_session(S.SELECT_DAY, **_picked()), messages.BACK_TO_SERVICE)
    )

    assert outcome.session.state == S.SELECT_SERVICE


def test_select_turn_valid_choice_lists_times(orchestrator):
    session = make_session(S.SELECT_TURN, **_picked(date="2024-05-23"))

    outcome = orchestrator.process(make_context(session, "matutino"))

    assert outcome.session.state == S.SELECT_TIME
    assert outcome.session.memory.turn == "Matutino"
    assert _rows(outcome.result.messages[0]) == ["09:00", "10:00", "11:00", "12:00"]


def test_select_turn_invalid_choice_reprompts_same_options(orchestrator):
    session = make_session(S.SELECT_TURN, **_picked(date="2024-05-23"))

    outcome = orchestrator.process(make_context(session, "Nocturno"))

    assert outcome.session.state == S.SELECT_TURN
    assert _rows(outcome.result.messages[0]) == ["Matutino", "Vespertino"]


def test_select_turn_back_to_days(orchestrator):
    session = make_session(S.SELECT_TURN, **_picked(date="2024-05-23"))

    outcome = orchestrator.process(make_context(session, messages.BACK_TO_DAY))

    assert outcome.session.state == S.SELECT_DAY
    assert outcome.result.messages[0].text == messages.ASK_DAY_AGAIN_MESSAGE


def test_turn_without_slots_does_not_advance(deps, store, clock):
    """An advertised turn that yields no slots loops on turn selection."""
    availability = MagicMock(spec=AvailabilityCalculator)
    availability.available_turns.return_value = ["Matutino"]
    availability.turn_count.return_value = 2
    availability.slots_for_turn.return_value = []
    inconsistent = FlowDependencies(
        tenants=deps.tenants,
        availability=availability,
        booking=deps.booking,
        today=deps.today,
    )
    orchestrator = ConversationOrchestrator(build_state_handlers(inconsistent), store, 3600, clock)
    session = make_session(S.SELECT_TURN, **_picked(date="2024-05-23"))

    outcome = orchestrator.process(make_context(session, "Matutino"))

    assert outcome.session.state == S.SELECT_TURN
    assert outcome.result.messages[0].text == messages.ASK_TURN_AGAIN_MESSAGE


def test_select_time_valid_choice_asks_for_name(orchestrator):
    session = make_session(
        S.SELECT_TIME,
        **_picked(date="2024-05-23", turn="Matutino", customer_name="Old Name"),
    )

    outcome = orchestrator.process(make_context(session, "9:00"))

    assert outcome.session.state == S.COLLECT_NAME
    assert outcome.session.memory.time == "09:00"
    assert outcome.session.memory.customer_name is None


def test_select_time_invalid_or_back_reprompts_times(orchestrator):
    session = make_session(S.SELECT_TIME, **_picked(date="2024-05-23", turn="Matutino"))

    for text in ("15:00", messages.BACK_TO_TIME):
        outcome = orchestrator.process(make_context(session, text))
        assert outcome.session.state == S.SELECT_TIME
        assert _rows(outcome.result.messages[0]) == ["09:00", "10:00", "11:00", "12:00"]


def test_collect_name_rules(orchestrator):
    session = make_session(S.COLLECT_NAME, **_picked(date="2024-05-23", turn="Matutino", time="10:00"))

    short = orchestrator.process(make_context(session, "Al"))
    valid = orchestrator.process(make_context(session, "  Ana   López "))

    assert short.session.state == S.COLLECT_NAME
    assert short.result.messages[0].text == messages.ASK_NAME_AGAIN_MESSAGE
    assert valid.session.state == S.CONFIRMATION
    assert valid.session.memory.customer_name == "Ana López"
    summary = valid.result.messages[0]
    assert isinstance(summary, ButtonsMessage)
    assert "Manicura" in summary.text and "2024-05-23" in summary.text and "10:00" in summary.text


def test_collect_name_navigation(orchestrator):
    session = make_session(S.COLLECT_NAME, **_picked(date="2024-05-23", turn="Matutino", time="10:00"))

    back = orchestrator.process(make_context(session, messages.BACK_TO_TIME))
    cancel = orchestrator.process(make_context(session, messages.CANCEL_PROCESS))

    assert back.session.state == S.SELECT_TIME
    assert back.session.memory.time is None
    assert cancel.session.state == S.IDLE
    assert cancel.result.messages[0].text == messages.NO_APPOINTMENT_MESSAGE


def _confirmation_session():
    return make_session(
        S.CONFIRMATION,
        **_picked(date="2024-05-23", turn="Matutino", time="10:00", customer_name="Ana López"),
    )


def test_confirmation_books_and_completes(orchestrator, store):
    outcome = orchestrator.process(make_context(_confirmation_session(), messages.CONFIRM_BY_USER))

    assert outcome.session.state == S.COMPLETED
    folio = outcome.session.memory.last_folio
    assert re.fullmatch(r"APP-[A-Z0-9]{6}", folio)
    assert folio in outcome.result.messages[0].text
    appointment = store.get_appointment_by_folio(TENANT_ID, folio)
    assert appointment.customer_name == "Ana López"
    assert appointment.time == "10:00"


def test_confirmation_lock_busy_returns_to_time_selection(orchestrator, store):
    store.acquire_lock(slot_lock_key(TENANT_ID, "srv-1", "2024-05-23", "10:00"), 30)

    outcome = orchestrator.process(make_context(_confirmation_session(), "si"))

    assert outcome.session.state == S.SELECT_TIME
    assert outcome.session.memory.last_folio is None
    assert outcome.result.messages[0].text == messages.SLOT_TAKEN_MESSAGE
    assert store.get_appointments_in_range(TENANT_ID, "srv-1", "2024-05-23", "2024-05-23") == []


def test_confirmation_negative_and_unclear_answers(orchestrator, store):
    cancelled = orchestrator.process(make_context(_confirmation_session(), messages.CANCEL_BY_USER))
    unclear = orchestrator.process(make_context(_confirmation_session(), "mmm déjame ver"))

    assert cancelled.session.state == S.IDLE
    assert cancelled.result.messages[0].text == messages.NO_APPOINTMENT_MESSAGE
    assert unclear.session.state == S.CONFIRMATION
    assert unclear.result.messages[0].text == messages.CONFIRM_AGAIN_MESSAGE
    assert store.get_appointments_in_range(TENANT_ID, "srv-1", "2024-05-23", "2024-05-23") == []


def test_confirmation_redelivered_keeps_the_booking(orchestrator, store):
    """Two deliveries of the same confirmation, both read from the same CONFIRMATION snapshot."""
    ctx = make_context(_confirmation_session(), messages.CONFIRM_BY_USER)

    first = orchestrator.process(ctx)
    second = orchestrator.process(ctx)

    assert first.session.state == S.COMPLETED
    assert second.session.state == S.COMPLETED
    assert second.session.memory.last_folio == first.session.memory.last_folio
    assert first.session.memory.last_folio in second.result.messages[0].text
    saved = store.get_session(TENANT_ID, CUSTOMER_ID)
    assert saved.state == S.COMPLETED
    assert saved.memory.last_folio == first.session.memory.last_folio
    assert len(store.get_appointments_in_range(TENANT_ID, "srv-1", "2024-05-23", "2024-05-23")) == 1


def test_confirmation_with_mixed_answer_asks_again(orchestrator, store):
    """An answer carrying both yes and no words neither books nor cancels."""
    for text in ("Sí, no hay problema", "no sé, sí"):
        outcome = orchestrator.process(make_context(_confirmation_session(), text))

        assert outcome.session.state == S.CONFIRMATION, text
        assert outcome.result.messages[0].text == messages.CONFIRM_AGAIN_MESSAGE

    assert store.get_appointments_in_range(TENANT_ID, "srv-1", "2024-05-23", "2024-05-23") == []


def test_cancel_appointment_by_folio_from_idle(orchestrator):
    booked = orchestrator.process(make_context(_confirmation_session(), "Sí, agendar"))
    folio = booked.session.memory.last_folio

    outcome = orchestrator.process(
        make_context(booked.session, f"quiero cancelar mi cita {folio}", Intent.CANCEL_APPOINTMENT.value)
    )
    missing = orchestrator.process(
        make_context(make_session(), "cancelar APP-ZZZZZZ", Intent.CANCEL_APPOINTMENT.value)
    )

    assert outcome.session.state == S.CANCELLED
    assert folio in outcome.result.messages[0].text
    assert missing.session.state == S.IDLE


def test_completed_session_starts_over(orchestrator):
    session = make_session(S.COMPLETED, last_folio="APP-ABC123")

    outcome = orchestrator.process(make_context(session, "otra cita", Intent.APPOINTMENT.value))

    assert outcome.session.state == S.SELECT_SERVICE


def test_support_intent_hands_over_to_a_person(orchestrator):
    outcome = orchestrator.process(make_context(make_session(), "quiero hablar con un humano", Intent.SUPPORT.value))
    later = orchestrator.process(make_context(outcome.session, "¿hola?"))

    assert outcome.session.state == S.HUMAN_SUPPORT
    assert outcome.result.messages == [TextMessage(text=messages.SUPPORT_HANDOFF_MESSAGE)]
    assert later.session.state == S.HUMAN_SUPPORT
    assert later.result.messages == []


def test_support_intent_during_triage(orchestrator):
    session = make_session(S.AGENT_CLASSIFIER)

    outcome = orchestrator.process(make_context(session, "necesito ayuda", Intent.SUPPORT.value))

    assert outcome.session.state == S.HUMAN_SUPPORT


def test_promotions_intent_lists_services(orchestrator):
    outcome = orchestrator.process(make_context(make_session(), "¿tienen promociones?", Intent.PROMOTIONS.value))

    assert outcome.session.state == S.AGENT_CLASSIFIER
    assert outcome.result.messages[0].text == messages.PROMOTIONS_MESSAGE
    assert _rows(outcome.result.messages[0]) == ["Manicura", "Pedicura"]


def test_reschedule_intent_starts_booking_with_notice(orchestrator):
    session = make_session(S.COMPLETED, last_folio="APP-ABC123")

    outcome = orchestrator.process(make_context(session, "quiero reagendar", Intent.RESCHEDULE.value))

    assert outcome.session.state == S.SELECT_SERVICE
    assert outcome.result.messages[0].text == messages.RESCHEDULE_MESSAGE


def test_confirmation_intent_after_booking_repeats_folio(orchestrator):
    completed = make_session(S.COMPLETED, last_folio="APP-ABC123")

    on_record = orchestrator.process(make_context(completed, "ok", Intent.CONFIRMATION.value))
    fresh = orchestrator.process(make_context(make_session(), "confirmar", Intent.CONFIRMATION.value))

    assert on_record.session.state == S.COMPLETED
    assert on_record.result.messages[0].text == messages.BOOKING_ON_RECORD_MESSAGE.format(folio="APP-ABC123")
    assert fresh.session.state == S.SELECT_SERVICE


def test_greeting_during_triage_repeats_welcome(orchestrator):
    outcome = orchestrator.process(make_context(make_session(S.AGENT_CLASSIFIER), "hola", Intent.GREETING.value))

    assert outcome.session.state == S.AGENT_CLASSIFIER
    assert outcome.result.messages[0].text == messages.WELCOME_MESSAGE


def test_full_booking_conversation(orchestrator, store):
    """Drive a whole conversation, reloading the session from the store each turn."""
    steps = [
        ("Hola", Intent.GREETING.value, S.AGENT_CLASSIFIER),
        ("Manicura", Intent.FAQ.value, S.SELECT_DAY),
        ("2024-05-24", None, S.SELECT_TURN),
        ("Vespertino", None, S.SELECT_TIME),
        ("15:00", None, S.COLLECT_NAME),
        ("Ana López", None, S.CONFIRMATION),
        ("Sí, agendar", None, S.COMPLETED),
    ]
    session = make_session()
    for text, intent, expected in steps:
        orchestrator.process(make_context(session, text, intent))
        session = store.get_session(TENANT_ID, CUSTOMER_ID)
        assert session.state == expected, text

    assert not store.check_availability(TENANT_ID, "srv-1", "2024-05-24", "15:00")


class _ExplodingHandler(StateHandler):
    def handle(self, ctx):
        raise RuntimeError("boom")


def test_handler_failure_resets_to_idle_and_keeps_memory(deps, store, clock):
    handlers = build_state_handlers(deps)
    handlers[S.SELECT_DAY] = _ExplodingHandler(deps)
    orchestrator = ConversationOrchestrator(handlers, store, 3600, clock)
    session = make_session(S.SELECT_DAY, **_picked())

    outcome = orchestrator.process(make_context(session, "2024-05-23"))

    assert outcome.result.messages == [TextMessage(text=messages.FLOW_ERROR_MESSAGE)]
    saved = store.get_session(TENANT_ID, CUSTOMER_ID)
    assert saved.state == S.IDLE
    assert saved.memory.service_id == "srv-1"


def test_unknown_memory_key_is_treated_as_handler_failure(deps, store, clock):
    class BadUpdate(StateHandler):
        def handle(self, ctx):
            return HandlerResult(new_state=S.SELECT_DAY, memory_update={"nope": 1})

    handlers = build_state_handlers(deps)
    handlers[S.SELECT_SERVICE] = BadUpdate(deps)
    orchestrator = ConversationOrchestrator(handlers, store, 3600, clock)

    outcome = orchestrator.process(make_context(make_session(S.SELECT_SERVICE), "x"))

    assert outcome.session.state == S.IDLE


def test_orchestrator_requires_handler_for_every_state(deps, store):
    handlers = build_state_handlers(deps)
    del handlers[S.CONFIRMATION]

    with pytest.raises(ValueError):
        ConversationOrchestrator(handlers, store)


def test_orchestrator_refreshes_ttl(orchestrator, clock):
    outcome = orchestrator.process(make_context(make_session(expires_at=clock.now + 5), "hola"))

    assert outcome.session.expires_at == clock.now + 3600
    assert outcome.session.updated_at == clock.now
