from __future__ import annotations

from typing import Any

from slotbot.domain.entities.outbound_message import ListRow

# Graph API limits for interactive messages
MAX_BUTTONS = 3
MAX_LIST_ROWS = 10
BUTTON_TITLE_LIMIT = 20
LIST_TITLE_LIMIT = 24
ROW_DESCRIPTION_LIMIT = 72
BODY_LIMIT = 1024


def truncate(value: str, limit: int) -> str:
    if len(value) <= limit:
        return value
    return value[: limit - 3] + "..."


def text_payload(recipient_id: str, text: str) -> dict[str, Any]:
    return {
        "messaging_product": "whatsapp",
        "recipient_type": "individual",
        "to": recipient_id,
        "type": "text",
        "text": {"preview_url": False, "body": text},
    }


def buttons_payload(recipient_id: str, text: str, options: list[str]) -> dict[str, Any]:
    return {
        "messaging_product": "whatsapp",
        "recipient_type": "individual",
        "to": recipient_id,
        "type": "interactive",
        "interactive": {
            "type": "button",
            "body": {"text": truncate(text, BODY_LIMIT)},
            "action": {
                "buttons": [
                    {
                        "type": "reply",
                        "reply": {"id": f"btn_{index}", "title": truncate(option, BUTTON_TITLE_LIMIT)},
                    }
                    for index, option in enumerate(options[:MAX_BUTTONS])
                ]
            },
        },
    }


def list_payload(
    recipient_id: str,
    text: str,
    title: str,
    button_label: str,
    rows: list[ListRow],
) -> dict[str, Any]:
    section_rows: list[dict[str, Any]] = []
    for index, row in enumerate(rows[:MAX_LIST_ROWS]):
        item: dict[str, Any] = {"id": f"row_{index}", "title": truncate(row.title, LIST_TITLE_LIMIT)}
        if row.description:
            item["description"] = truncate(row.description, ROW_DESCRIPTION_LIMIT)
        section_rows.append(item)

    return {
        "messaging_product": "whatsapp",
        "recipient_type": "individual",
        "to": recipient_id,
        "type": "interactive",
        "interactive": {
            "type": "list",
            "body": {"text": truncate(text, BODY_LIMIT)},
            "action": {
                "button": truncate(button_label, BUTTON_TITLE_LIMIT),
                "sections": [{"title": truncate(title, LIST_TITLE_LIMIT), "rows": section_rows}],
            },
        },
    }
