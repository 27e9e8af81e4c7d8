from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from order_bot.core.domain.entities._base import EntityMixin


@dataclass(slots=True)
class BotSettingsEntity(EntityMixin):
    id: int
    client_id: int
    whatsapp_template: str | None = None
    sms_template: str | None = None
    whatsapp_delay_minutes: int = 60
    sms_delay_minutes: int = 240
    sms_enabled: bool = False
    language: str | None = None
    company_name: str | None = None
    support_phone: str | None = None
    store_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def template_for(self, channel: str) -> str | None:
        return self.whatsapp_template if channel == "whatsapp" else self.sms_template

    def delay_minutes_for(self, channel: str) -> int:
        return self.whatsapp_delay_minutes if channel == "whatsapp" else self.sms_delay_minutes

    def enabled_channels(self) -> list[str]:
        """WhatsApp sempre; SMS só quando habilitado pelo cliente."""
        channels = ["whatsapp"]
        if self.sms_enabled:
            channels.append("sms")
        return channels
