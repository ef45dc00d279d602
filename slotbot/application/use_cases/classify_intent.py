from __future__ import annotations

from slotbot.application.ports.llm import IntentClassifierPort
from slotbot.domain.entities.intent import IntentClassification


class ClassifyIntentUseCase:
    def __init__(self, classifier: IntentClassifierPort) -> None:
        self._classifier = classifier

    def execute(self, text: str) -> IntentClassification:
        return self._classifier.classify_intent(text=text)
