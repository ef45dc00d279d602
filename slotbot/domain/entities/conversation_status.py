from enum import Enum


class ConversationStatus(str, Enum):
    IDLE = "IDLE"
    SELECT_SERVICE = "SELECT_SERVICE"
    SELECT_DAY = "SELECT_DAY"
    SELECT_TURN = "SELECT_TURN"
    SELECT_TIME = "SELECT_TIME"
    COLLECT_NAME = "COLLECT_NAME"
    CONFIRMATION = "CONFIRMATION"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    AGENT_CLASSIFIER = "AGENT_CLASSIFIER"
    HUMAN_SUPPORT = "HUMAN_SUPPORT"

    @classmethod
    def parse(cls, value: str | None) -> "ConversationStatus":
        """Map a stored tag to a status; unknown tags fall back to IDLE."""
        try:
            return cls(value)
        except ValueError:
            return cls.IDLE
