from abc import ABC, abstractmethod

from slotbot.domain.entities.session import Session


class SessionStorePort(ABC):
    @abstractmethod
    def get_session(self, tenant_id: str, customer_id: str) -> Session | None:
        """
        Load the session for (tenant, customer).
        Returns None when no record exists or the stored one has expired.
        """
        raise NotImplementedError

    @abstractmethod
    def save_session(self, session: Session) -> None:
        """Overwrite the session record keyed by (tenant, customer)."""
        raise NotImplementedError

    @abstractmethod
    def has_processed(self, tenant_id: str, message_id: str) -> bool:
        """Check if an inbound message id was already handled for this tenant."""
        raise NotImplementedError

    @abstractmethod
    def mark_processed(self, tenant_id: str, message_id: str) -> None:
        """Remember an inbound message id so a redelivery can be skipped."""
        raise NotImplementedError
