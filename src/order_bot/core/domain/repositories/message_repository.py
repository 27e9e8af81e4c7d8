from abc import ABC, abstractmethod
from datetime import datetime

from order_bot.core.domain.entities.message_entity import MessageEntity


class MessageRepository(ABC):
    @abstractmethod
    def create_pending(
        self,
        order_id: int,
        client_id: int,
        buyer_id: int,
        channel: str,
        phone: str,
        content: str,
        attempt: int,
    ) -> MessageEntity:
        """Toda tentativa nasce como uma nova linha `pending`."""
        ...

    @abstractmethod
    def mark_sent(self, message_id: int, sent_at: datetime) -> MessageEntity:
        ...

    @abstractmethod
    def mark_failed(self, message_id: int, error: str) -> MessageEntity:
        ...

    @abstractmethod
    def list_for_order(self, order_id: int) -> list[MessageEntity]:
        ...

    @abstractmethod
    def count_attempts(self, order_id: int, channel: str) -> int:
        ...
