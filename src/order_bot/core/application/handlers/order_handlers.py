from __future__ import annotations

from typing import Any

import structlog
from django.conf import settings
from django.db import DatabaseError, transaction

from order_bot.core.application.commands.order_commands import ConfirmOrderCommand, CreateOrderFromWebhookCommand
from order_bot.core.application.cqrs import CommandHandler, PagedResult, QueryHandler
from order_bot.core.application.queries.order_queries import (
    GetOrderByTokenQuery,
    ListOrderMessagesQuery,
    ListOrdersQuery,
)
from order_bot.core.application.services.notification_scheduler import NotificationScheduler
from order_bot.core.application.services.order_presenter import OrderPresenter
from order_bot.core.application.services.token_service import ConfirmationTokenService
from order_bot.core.domain.entities.buyer_entity import BuyerEntity
from order_bot.core.domain.entities.message_entity import MessageEntity
from order_bot.core.domain.entities.order_entity import OrderEntity
from order_bot.core.domain.events.events import OrderReceivedEvent
from order_bot.core.domain.events.exceptions import (
    ClientNotFoundError,
    DuplicateOrderError,
    OrderNotFoundError,
    PersistenceError,
    ValidationError,
)
from order_bot.core.domain.repositories.buyer_repository import BuyerRepository
from order_bot.core.domain.repositories.client_repository import ClientRepository
from order_bot.core.domain.repositories.message_repository import MessageRepository
from order_bot.core.domain.repositories.order_repository import OrderRepository
from order_bot.core.domain.services.event_dispatcher import EventDispatcher
from order_bot.core.utils.phone_utils import normalize_phone

logger = structlog.get_logger(__name__)


# ╭──────────────────────────────────────────────╮
# │ Ingestão via webhook                        │
# ╰──────────────────────────────────────────────╯
class CreateOrderFromWebhookHandler(CommandHandler[CreateOrderFromWebhookCommand]):
    """
    1. valida cliente e telefone
    2. comprador (find-or-create por client_id+phone) e pedido numa transação
    3. agenda as notificações de forma síncrona

    Se (2) falha nada é criado. Se (3) falha o pedido fica gravado sem
    `*_scheduled_at` e o erro sobe; o monitor reprocessa depois.
    """

    def __init__(
        self,
        client_repo: ClientRepository,
        buyer_repo: BuyerRepository,
        order_repo: OrderRepository,
        token_service: ConfirmationTokenService,
        scheduler: NotificationScheduler,
        dispatcher: EventDispatcher,
    ) -> None:
        self.client_repo = client_repo
        self.buyer_repo = buyer_repo
        self.order_repo = order_repo
        self.token_service = token_service
        self.scheduler = scheduler
        self.dispatcher = dispatcher

    def handle(self, cmd: CreateOrderFromWebhookCommand) -> tuple[OrderEntity, BuyerEntity]:
        p = cmd.payload
        if self.client_repo.find_by_id(p.client_id) is None:
            raise ClientNotFoundError(p.client_id)

        phone = normalize_phone(p.buyer.phone, default_region=settings.DEFAULT_PHONE_REGION)
        if not phone:
            raise ValidationError("Invalid buyer phone", fields=["buyer.phone"])

        if self.order_repo.exists_order_number(p.order_number):
            raise DuplicateOrderError(p.order_number)

        try:
            with transaction.atomic():
                buyer, created = self.buyer_repo.find_or_create(
                    client_id=p.client_id,
                    phone=phone,
                    name=p.buyer.name,
                    email=p.buyer.email,
                    address=p.buyer.address,
                )
                order = self.order_repo.create({
                    "order_number": p.order_number,
                    "client_id": p.client_id,
                    "buyer_id": buyer.id,
                    "product_name": p.product_name,
                    "quantity": p.quantity,
                    "total_price": p.total_price,
                    "confirmation_token": self.token_service.mint(),
                    "notes": p.notes,
                    "shipping_address": p.shipping_address or p.buyer.address,
                    "wilaya": p.wilaya,
                    "commune": p.commune,
                    "payment_method": p.payment_method,
                })
        except DatabaseError as exc:
            logger.error("webhook.persist_failed", order_number=p.order_number, error=str(exc))
            raise PersistenceError(f"Could not persist order: {exc}") from exc

        logger.info(
            "webhook.order_created",
            order_id=order.id,
            client_id=order.client_id,
            buyer_id=buyer.id,
            new_buyer=created,
        )
        self.dispatcher.dispatch(
            OrderReceivedEvent(
                order_id=order.id,
                client_id=order.client_id,
                buyer_id=buyer.id,
                order_number=order.order_number,
            )
        )

        for evt in self.scheduler.schedule(order, buyer):
            self.dispatcher.dispatch(evt)

        return order, buyer


# ╭──────────────────────────────────────────────╮
# │ Confirmação pública                         │
# ╰──────────────────────────────────────────────╯
class ConfirmOrderHandler(CommandHandler[ConfirmOrderCommand]):
    def __init__(self, token_service: ConfirmationTokenService, presenter: OrderPresenter) -> None:
        self.token_service = token_service
        self.presenter = presenter

    def handle(self, cmd: ConfirmOrderCommand) -> dict[str, Any]:
        order = self.token_service.consume(cmd.token, cmd.status, cmd.notes)
        return self.presenter.present(order)


class GetOrderByTokenHandler(QueryHandler[dict[str, Any], dict[str, Any]]):
    def __init__(self, token_service: ConfirmationTokenService) -> None:
        self.token_service = token_service

    def handle(self, query: GetOrderByTokenQuery) -> dict[str, Any]:
        return self.token_service.resolve_public(query.filtros.get("token", ""))


# ╭──────────────────────────────────────────────╮
# │ Leitura (dashboard)                         │
# ╰──────────────────────────────────────────────╯
class ListOrdersHandler(QueryHandler[dict[str, Any], PagedResult[OrderEntity]]):
    def __init__(self, client_repo: ClientRepository, order_repo: OrderRepository) -> None:
        self.client_repo = client_repo
        self.order_repo = order_repo

    def handle(self, query: ListOrdersQuery) -> PagedResult[OrderEntity]:
        filtros = dict(query.filtros or {})
        client_id = filtros.pop("client_id", None)
        if client_id is None or self.client_repo.find_by_id(client_id) is None:
            raise ClientNotFoundError(client_id)
        return self.order_repo.search(client_id, filtros, query.page, query.page_size)


class ListOrderMessagesHandler(QueryHandler[dict[str, Any], list[MessageEntity]]):
    def __init__(self, order_repo: OrderRepository, message_repo: MessageRepository) -> None:
        self.order_repo = order_repo
        self.message_repo = message_repo

    def handle(self, query: ListOrderMessagesQuery) -> list[MessageEntity]:
        order_id = query.filtros["order_id"]
        if self.order_repo.find_by_id(order_id) is None:
            raise OrderNotFoundError()
        return self.message_repo.list_for_order(order_id)
