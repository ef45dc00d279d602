from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class ListRow:
    title: str
    description: str | None = None


@dataclass(frozen=True)
class TextMessage:
    text: str


@dataclass(frozen=True)
class ButtonsMessage:
    text: str
    options: tuple[str, ...]


@dataclass(frozen=True)
class ListMessage:
    text: str
    title: str
    button_label: str
    rows: tuple[ListRow, ...]


OutboundMessage = Union[TextMessage, ButtonsMessage, ListMessage]
