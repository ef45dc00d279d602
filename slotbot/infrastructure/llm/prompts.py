from slotbot.domain.entities.intent import Intent


def build_classify_prompt(text: str) -> str:
    intents = ", ".join(intent.value for intent in Intent)
    return (
        "You classify WhatsApp messages sent to a business that books appointments.\n"
        "Customers write in Spanish.\n"
        "Return ONLY valid JSON. No markdown. No extra text.\n"
        "Output schema:\n"
        "  {\"intent\": \"...\"}\n"
        "Rules:\n"
        f"  - intent must be exactly one of: {intents}\n"
        "  - appointment: wants to book or asks for available days or times.\n"
        "  - cancel_appointment: wants to cancel an existing appointment (may include a folio like APP-AB12CD).\n"
        "  - reschedule: wants to move an existing appointment.\n"
        "  - confirmation: acknowledges or confirms something already arranged (si, ok, confirmo).\n"
        "  - support: asks to talk to a person or reports a problem.\n"
        "  - promotions: asks about discounts, offers or promotions.\n"
        "  - greeting: only says hello.\n"
        "  - faq: any other question about the business.\n"
        "  - fallback: cannot tell.\n"
        "\n"
        f"Message: {text!r}\n"
    )
