from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from order_bot.core.domain.entities._base import EntityMixin


@dataclass(slots=True)
class MessageEntity(EntityMixin):
    id: int
    order_id: int
    client_id: int
    buyer_id: int
    message_type: str
    recipient_phone: str
    message_content: str
    status: str = "pending"
    attempt: int = 1
    error_message: str | None = None
    sent_at: datetime | None = None
    delivered_at: datetime | None = None
    created_at: datetime | None = None

    def preview(self, length: int = 50) -> str:
        return (self.message_content[:length] + '...') if len(self.message_content) > length else self.message_content
