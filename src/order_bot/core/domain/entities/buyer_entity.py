from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from order_bot.core.domain.entities._base import EntityMixin


@dataclass(slots=True)
class BuyerEntity(EntityMixin):
    id: int
    client_id: int
    name: str
    phone: str
    email: str | None = None
    address: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
