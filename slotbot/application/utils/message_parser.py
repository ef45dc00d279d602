from __future__ import annotations

import re
from dataclasses import dataclass

# "CODE: text". The code must start with a letter so "09:00" stays intact.
_CODE_PREFIX = re.compile(r"^\s*([A-Za-z][A-Za-z0-9_\-]*)\s*:\s*(.*)$", re.DOTALL)


@dataclass(frozen=True)
class ParsedMessage:
    text: str
    code: str | None = None


def parse_message(raw_text: str | None) -> ParsedMessage:
    """Separate an optional leading code from the actual message text."""
    text = (raw_text or "").strip()
    match = _CODE_PREFIX.match(text)
    if not match:
        return ParsedMessage(text=text)
    return ParsedMessage(text=match.group(2).strip(), code=match.group(1))
