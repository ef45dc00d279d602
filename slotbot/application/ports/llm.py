from abc import ABC, abstractmethod

from slotbot.domain.entities.intent import IntentClassification


class IntentClassifierPort(ABC):
    @abstractmethod
    def classify_intent(self, text: str) -> IntentClassification:
        """
        Classify a free-text customer message.

        Requirements:
        - intent must be one of the Intent enum values
        - Raise LLMUpstreamError on provider failures, LLMContractError on bad output
        """
        raise NotImplementedError
