from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


# ───────────────────────────────────────────────
# Event Base e Domain Events
# ───────────────────────────────────────────────
@dataclass(frozen=True, kw_only=True)
class DomainEvent:
    event_id: uuid.UUID = field(default_factory=uuid.uuid4)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(UTC))

# ╭──────────────────────────────────────────────╮
# │ 1. Pedidos                                  │
# ╰──────────────────────────────────────────────╯
@dataclass(frozen=True)
class OrderReceivedEvent(DomainEvent):
    order_id: int
    client_id: int
    buyer_id: int
    order_number: str

@dataclass(frozen=True)
class OrderConfirmedEvent(DomainEvent):
    """
    Disparado após o commit da decisão do comprador.
    `order` é o payload público já serializado (o mesmo que vai ao realtime).
    """
    order_id: int
    client_id: int
    status: str
    order: dict[str, Any]

# ╭──────────────────────────────────────────────╮
# │ 2. Notificações                             │
# ╰──────────────────────────────────────────────╯
@dataclass(frozen=True)
class NotificationScheduledEvent(DomainEvent):
    order_id: int
    client_id: int
    channel: str
    scheduled_for: datetime
    redrive: bool = False

@dataclass(frozen=True)
class NotificationSentEvent(DomainEvent):
    order_id: int
    message_id: int
    channel: str
    attempt: int
    sent_at: datetime

@dataclass(frozen=True)
class NotificationFailedEvent(DomainEvent):
    order_id: int
    message_id: int
    channel: str
    attempt: int
    error: str
