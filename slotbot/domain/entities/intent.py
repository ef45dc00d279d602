from dataclasses import dataclass
from enum import Enum


class Intent(str, Enum):
    APPOINTMENT = "appointment"
    GREETING = "greeting"
    FAQ = "faq"
    PROMOTIONS = "promotions"
    SUPPORT = "support"
    CONFIRMATION = "confirmation"
    RESCHEDULE = "reschedule"
    CANCEL_APPOINTMENT = "cancel_appointment"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class IntentClassification:
    intent: str
    normalized_text: str
