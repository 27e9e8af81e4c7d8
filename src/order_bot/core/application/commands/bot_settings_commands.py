from dataclasses import dataclass

from order_bot.core.application.cqrs import CommandDTO
from order_bot.core.application.dtos.bot_settings_dto import BotSettingsUpdateDTO


@dataclass(frozen=True)
class UpdateBotSettingsCommand(CommandDTO):
    client_id: int
    payload: BotSettingsUpdateDTO
