from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class BotSettingsUpdateDTO(BaseModel):
    """Atualização parcial: apenas os campos enviados são gravados."""
    model_config = ConfigDict(extra="forbid")

    whatsapp_template: str | None = None
    sms_template: str | None = None
    whatsapp_delay_minutes: int | None = Field(default=None, ge=0)
    sms_delay_minutes: int | None = Field(default=None, ge=0)
    sms_enabled: bool | None = None
    language: Literal["en", "fr", "ar"] | None = None
    company_name: str | None = None
    support_phone: str | None = None
    store_url: str | None = None


class TemplatePreviewDTO(BaseModel):
    channel: Literal["whatsapp", "sms"] = "whatsapp"
    template: str | None = None
