from __future__ import annotations

import re
import unicodedata

AFFIRMATIVE_WORDS = frozenset(
    {
        "si",
        "sip",
        "confirmar",
        "confirmo",
        "confirma",
        "agendar",
        "agenda",
        "claro",
        "ok",
        "okay",
        "vale",
        "yes",
        "confirm",
    }
)

NEGATIVE_WORDS = frozenset(
    {
        "no",
        "cancelar",
        "cancela",
        "cancelo",
        "cancel",
    }
)

FOLIO_PATTERN = re.compile(r"\bAPP-[A-Z0-9]{6}\b", re.IGNORECASE)


def normalize_text(text: str) -> str:
    """Lowercase, strip accents and punctuation, collapse whitespace."""
    decomposed = unicodedata.normalize("NFKD", text.casefold())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    stripped = re.sub(r"[^a-z0-9:\-\s]", " ", stripped)
    return re.sub(r"\s+", " ", stripped).strip()


def same_option(text: str, option: str) -> bool:
    return normalize_text(text) == normalize_text(option)


def find_option(text: str, options: list[str]) -> str | None:
    """Return the option the text names (case and accent insensitive), if any."""
    for option in options:
        if same_option(text, option):
            return option
    return None


def is_negative(text: str) -> bool:
    return any(word in NEGATIVE_WORDS for word in normalize_text(text).split())


def is_affirmative(text: str) -> bool:
    return any(word in AFFIRMATIVE_WORDS for word in normalize_text(text).split())


def extract_folio(text: str) -> str | None:
    match = FOLIO_PATTERN.search(text or "")
    return match.group(0).upper() if match else None


def read_confirmation(text: str, confirm_option: str, cancel_option: str) -> bool | None:
    """
    True to confirm, False to cancel, None when unclear.
    The button titles win; otherwise an answer carrying both affirmative and negative words is unclear.
    """
    if same_option(text, confirm_option):
        return True
    if same_option(text, cancel_option):
        return False
    affirmative = is_affirmative(text)
    negative = is_negative(text)
    if affirmative == negative:
        return None
    return affirmative
