from __future__ import annotations

from slotbot.application.fsm import messages
from slotbot.application.utils.slot_times import parse_iso_date, weekday_index
from slotbot.domain.entities.outbound_message import (
    ButtonsMessage,
    ListMessage,
    ListRow,
    OutboundMessage,
    TextMessage,
)
from slotbot.domain.entities.service import Service
from slotbot.domain.entities.session import SessionMemory


def list_prompt(
    text: str,
    title: str,
    button_label: str,
    rows: list[ListRow],
    max_rows: int,
) -> OutboundMessage:
    # Channels reject empty lists
    if not rows:
        return TextMessage(text=text)
    return ListMessage(text=text, title=title, button_label=button_label, rows=tuple(rows[:max_rows]))


def services_prompt(services: list[Service], text: str, max_rows: int) -> OutboundMessage:
    rows = [ListRow(title=s.name, description=f"${s.price:g}" if s.price is not None else None) for s in services]
    return list_prompt(text, messages.TITLE_SERVICES, messages.BUTTON_SERVICES, rows, max_rows)


def days_prompt(days: list[str], text: str, max_rows: int) -> OutboundMessage:
    rows = [ListRow(title=day, description=_weekday_name(day)) for day in days]
    return list_prompt(text, messages.TITLE_DAYS, messages.BUTTON_DAYS, rows, max_rows)


def turns_prompt(turns: list[str], text: str, max_rows: int) -> OutboundMessage:
    rows = [ListRow(title=turn, description=messages.ROW_DESCRIPTION) for turn in turns]
    return list_prompt(text, messages.TITLE_TURNS, messages.BUTTON_TURNS, rows, max_rows)


def times_prompt(slots: list[str], text: str, max_rows: int) -> OutboundMessage:
    rows = [ListRow(title=slot, description=messages.ROW_DESCRIPTION) for slot in slots]
    return list_prompt(text, messages.TITLE_TIMES, messages.BUTTON_TIMES, rows, max_rows)


def name_prompt(text: str = messages.ASK_NAME_MESSAGE) -> OutboundMessage:
    return ListMessage(
        text=text,
        title=messages.TITLE_NAME,
        button_label=messages.BUTTON_NAME,
        rows=(
            ListRow(title=messages.BACK_TO_TIME, description=messages.BACK_TO_TIME),
            ListRow(title=messages.CANCEL_PROCESS, description=messages.CANCEL_PROCESS),
        ),
    )


def confirmation_prompt(memory: SessionMemory, customer_name: str) -> OutboundMessage:
    summary = messages.CONFIRM_SUMMARY_MESSAGE.format(
        service_name=memory.service_name,
        date=memory.date,
        time=memory.time,
        customer_name=customer_name,
    )
    return ButtonsMessage(text=summary, options=(messages.CONFIRM_BY_USER, messages.CANCEL_BY_USER))


def confirm_again_prompt() -> OutboundMessage:
    return ButtonsMessage(
        text=messages.CONFIRM_AGAIN_MESSAGE,
        options=(messages.CONFIRM_BY_USER, messages.CANCEL_BY_USER),
    )


def _weekday_name(day: str) -> str:
    parsed = parse_iso_date(day)
    if parsed is None:
        return messages.ROW_DESCRIPTION
    return messages.WEEKDAY_NAMES[weekday_index(parsed)]
