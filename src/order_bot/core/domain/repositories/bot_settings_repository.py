from abc import ABC, abstractmethod
from typing import Any

from order_bot.core.domain.entities.bot_settings_entity import BotSettingsEntity


class BotSettingsRepository(ABC):
    @abstractmethod
    def get_or_create(self, client_id: int) -> BotSettingsEntity:
        """Exatamente uma linha por cliente, criada com defaults no primeiro acesso."""
        ...

    @abstractmethod
    def update(self, client_id: int, changes: dict[str, Any]) -> BotSettingsEntity:
        ...
