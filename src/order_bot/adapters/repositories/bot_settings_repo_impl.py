from typing import Any

from order_bot.core.domain.entities.bot_settings_entity import BotSettingsEntity
from order_bot.core.domain.repositories.bot_settings_repository import BotSettingsRepository
from plugins.django_interface.models import BotSettings as BotSettingsModel

EDITABLE_FIELDS = {
    "whatsapp_template",
    "sms_template",
    "whatsapp_delay_minutes",
    "sms_delay_minutes",
    "sms_enabled",
    "language",
    "company_name",
    "support_phone",
    "store_url",
}


class BotSettingsRepoImpl(BotSettingsRepository):
    def get_or_create(self, client_id: int) -> BotSettingsEntity:
        m, _ = BotSettingsModel.objects.get_or_create(client_id=client_id)
        return BotSettingsEntity.from_model(m)

    def update(self, client_id: int, changes: dict[str, Any]) -> BotSettingsEntity:
        m, _ = BotSettingsModel.objects.get_or_create(client_id=client_id)
        fields = [k for k in changes if k in EDITABLE_FIELDS]
        for k in fields:
            setattr(m, k, changes[k])
        if fields:
            m.save(update_fields=[*fields, "updated_at"])
        return BotSettingsEntity.from_model(m)
