from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from order_bot.core.domain.entities._base import EntityMixin

TERMINAL_STATUSES = frozenset({"approved", "declined", "changed"})
CHANNELS = ("whatsapp", "sms")


@dataclass(slots=True)
class OrderEntity(EntityMixin):
    id: int
    order_number: str
    client_id: int
    buyer_id: int
    product_name: str
    quantity: int
    total_price: Decimal
    confirmation_token: str
    status: str = "pending"
    whatsapp_sent: bool = False
    whatsapp_sent_at: datetime | None = None
    whatsapp_scheduled_at: datetime | None = None
    sms_sent: bool = False
    sms_sent_at: datetime | None = None
    sms_scheduled_at: datetime | None = None
    confirmed_at: datetime | None = None
    payment_status: str = "unpaid"
    payment_method: str | None = None
    delivery_status: str = "pending"
    shipping_address: str | None = None
    wilaya: str | None = None
    commune: str | None = None
    notes: str | None = None
    internal_notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == "pending"

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def is_sent(self, channel: str) -> bool:
        return bool(getattr(self, f"{channel}_sent"))

    def scheduled_at(self, channel: str) -> datetime | None:
        return getattr(self, f"{channel}_scheduled_at")

    def confirmation_link(self, base_url: str) -> str:
        return f"{base_url.rstrip('/')}/confirm?orderId={self.id}&token={self.confirmation_token}"
