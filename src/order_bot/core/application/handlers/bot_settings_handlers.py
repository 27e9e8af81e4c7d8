from __future__ import annotations

from decimal import Decimal
from typing import Any

import structlog
from django.utils import timezone

from order_bot.core.application.commands.bot_settings_commands import UpdateBotSettingsCommand
from order_bot.core.application.cqrs import CommandHandler, QueryHandler
from order_bot.core.application.queries.bot_settings_queries import GetBotSettingsQuery, PreviewTemplateQuery
from order_bot.core.application.services.notification_scheduler import NotificationScheduler
from order_bot.core.domain.entities.bot_settings_entity import BotSettingsEntity
from order_bot.core.domain.entities.buyer_entity import BuyerEntity
from order_bot.core.domain.entities.order_entity import OrderEntity
from order_bot.core.domain.events.exceptions import ClientNotFoundError
from order_bot.core.domain.repositories.bot_settings_repository import BotSettingsRepository
from order_bot.core.domain.repositories.client_repository import ClientRepository
from order_bot.core.domain.services.order_numbers import generate_order_number
from order_bot.core.utils.template_utils import validate_template

logger = structlog.get_logger(__name__)

# Dados fictícios usados na pré-visualização do dashboard
SAMPLE_BUYER_NAME = "Ahmed Benali"
SAMPLE_PRODUCT = "Wireless Headphones"
SAMPLE_QUANTITY = 2
SAMPLE_TOTAL = Decimal("4500")
SAMPLE_TOKEN = "sample-token"


class GetBotSettingsHandler(QueryHandler[dict[str, Any], BotSettingsEntity]):
    def __init__(self, client_repo: ClientRepository, bot_settings_repo: BotSettingsRepository) -> None:
        self.client_repo = client_repo
        self.bot_settings_repo = bot_settings_repo

    def handle(self, query: GetBotSettingsQuery) -> BotSettingsEntity:
        client_id = query.filtros["client_id"]
        if self.client_repo.find_by_id(client_id) is None:
            raise ClientNotFoundError(client_id)
        return self.bot_settings_repo.get_or_create(client_id)


class UpdateBotSettingsHandler(CommandHandler[UpdateBotSettingsCommand]):
    def __init__(self, client_repo: ClientRepository, bot_settings_repo: BotSettingsRepository) -> None:
        self.client_repo = client_repo
        self.bot_settings_repo = bot_settings_repo

    def handle(self, cmd: UpdateBotSettingsCommand) -> BotSettingsEntity:
        if self.client_repo.find_by_id(cmd.client_id) is None:
            raise ClientNotFoundError(cmd.client_id)

        changes = cmd.payload.model_dump(exclude_unset=True)
        for key in ("whatsapp_template", "sms_template"):
            if changes.get(key):
                validate_template(changes[key])
            elif key in changes:
                changes[key] = None  # vazio → volta ao texto padrão do idioma

        # garante a linha antes do update parcial
        self.bot_settings_repo.get_or_create(cmd.client_id)
        updated = self.bot_settings_repo.update(cmd.client_id, changes)
        logger.info("bot_settings.updated", client_id=cmd.client_id, fields=sorted(changes))
        return updated


class PreviewTemplateHandler(QueryHandler[dict[str, Any], str]):
    """
    Renderiza um template (enviado ou salvo) com dados de exemplo, usando
    o mesmo caminho de renderização do agendador.
    """

    def __init__(
        self,
        client_repo: ClientRepository,
        bot_settings_repo: BotSettingsRepository,
        scheduler: NotificationScheduler,
    ) -> None:
        self.client_repo = client_repo
        self.bot_settings_repo = bot_settings_repo
        self.scheduler = scheduler

    def handle(self, query: PreviewTemplateQuery) -> str:
        f = query.filtros
        client = self.client_repo.find_by_id(f["client_id"])
        if client is None:
            raise ClientNotFoundError(f["client_id"])
        channel = f.get("channel") or "whatsapp"

        bot_settings = self.bot_settings_repo.get_or_create(client.id)
        if f.get("template"):
            validate_template(f["template"])
            if channel == "whatsapp":
                bot_settings.whatsapp_template = f["template"]
            else:
                bot_settings.sms_template = f["template"]

        now = timezone.now()
        order = OrderEntity(
            id=0,
            order_number=generate_order_number(),
            client_id=client.id,
            buyer_id=0,
            product_name=SAMPLE_PRODUCT,
            quantity=SAMPLE_QUANTITY,
            total_price=SAMPLE_TOTAL,
            confirmation_token=SAMPLE_TOKEN,
            created_at=now,
        )
        buyer = BuyerEntity(id=0, client_id=client.id, name=SAMPLE_BUYER_NAME, phone="213555000000")
        context = self.scheduler.build_context(order, buyer, client, bot_settings)
        return self.scheduler.render(channel, context, client, bot_settings)
