from dataclasses import dataclass

from order_bot.core.application.cqrs import CommandDTO
from order_bot.core.application.dtos.webhook_order_dto import WebhookOrderDTO


@dataclass(frozen=True)
class CreateOrderFromWebhookCommand(CommandDTO):
    payload: WebhookOrderDTO

@dataclass(frozen=True)
class ConfirmOrderCommand(CommandDTO):
    token: str
    status: str
    notes: str | None = None
