from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from order_bot.core.domain.entities._base import EntityMixin


@dataclass(slots=True)
class ClientEntity(EntityMixin):
    id: int
    name: str
    email: str
    phone: str | None = None
    company_name: str | None = None
    language: str = "en"
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def display_name(self) -> str:
        return self.company_name or self.name
