from __future__ import annotations

from slotbot.application.ports.llm import IntentClassifierPort
from slotbot.application.utils.message_rules import FOLIO_PATTERN, normalize_text
from slotbot.domain.entities.intent import Intent, IntentClassification

_CANCEL_WORDS = {"cancelar", "cancela", "cancelo", "anular"}
_APPOINTMENT_WORDS = {"cita", "citas", "turno", "agendar", "agenda", "reservar", "reserva", "apartar"}
_GREETING_WORDS = {"hola", "buenos", "buenas", "saludos", "hey"}
_PROMOTION_WORDS = {"promo", "promos", "promocion", "promociones", "descuento", "descuentos", "oferta"}
_SUPPORT_WORDS = {"soporte", "ayuda", "humano", "agente", "asesor"}
_CONFIRMATION_WORDS = {"si", "confirmar", "confirmo", "ok"}
_RESCHEDULE_WORDS = {"reagendar", "reprogramar", "cambiar", "mover"}


class KeywordIntentClassifier(IntentClassifierPort):
    """Spanish keyword rules. Used when no OpenAI key is configured."""

    def classify_intent(self, text: str) -> IntentClassification:
        normalized = normalize_text(text)
        words = set(normalized.split())

        if (words & _CANCEL_WORDS) and ((words & _APPOINTMENT_WORDS) or FOLIO_PATTERN.search(text)):
            intent = Intent.CANCEL_APPOINTMENT
        elif words & _APPOINTMENT_WORDS:
            intent = Intent.APPOINTMENT
        elif words & _GREETING_WORDS:
            intent = Intent.GREETING
        elif words & _PROMOTION_WORDS:
            intent = Intent.PROMOTIONS
        elif words & _SUPPORT_WORDS:
            intent = Intent.SUPPORT
        elif words & _CONFIRMATION_WORDS:
            intent = Intent.CONFIRMATION
        elif words & _RESCHEDULE_WORDS:
            intent = Intent.RESCHEDULE
        else:
            intent = Intent.FAQ

        return IntentClassification(intent=intent.value, normalized_text=normalized)
