from abc import ABC, abstractmethod

from slotbot.domain.entities.outbound_message import ListRow


class MessagePlatformPort(ABC):
    @abstractmethod
    def send_text(self, recipient_id: str, text: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def send_buttons(self, recipient_id: str, text: str, options: list[str]) -> None:
        raise NotImplementedError

    @abstractmethod
    def send_list(
        self,
        recipient_id: str,
        text: str,
        title: str,
        button_label: str,
        rows: list[ListRow],
    ) -> None:
        raise NotImplementedError
