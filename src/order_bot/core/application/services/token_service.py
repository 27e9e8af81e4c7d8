from __future__ import annotations

import secrets
from typing import Any

import structlog
from django.db import transaction
from django.utils import timezone

from order_bot.core.application.services.order_presenter import OrderPresenter
from order_bot.core.domain.entities.order_entity import TERMINAL_STATUSES, OrderEntity
from order_bot.core.domain.events.events import OrderConfirmedEvent
from order_bot.core.domain.events.exceptions import OrderNotFoundError, ValidationError
from order_bot.core.domain.repositories.order_repository import OrderRepository
from order_bot.core.domain.services.event_dispatcher import EventDispatcher

logger = structlog.get_logger(__name__)

TOKEN_BYTES = 32  # 256 bits


class ConfirmationTokenService:
    """
    Token de confirmação como capacidade (não é credencial de login).

    - mint: segredo aleatório; unicidade garantida pela coluna UNIQUE.
    - resolve: token → pedido (sem vazar dados do comprador).
    - consume: decisão do comprador, válida apenas enquanto `pending`.
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        presenter: OrderPresenter,
        dispatcher: EventDispatcher,
    ) -> None:
        self.order_repo = order_repo
        self.presenter = presenter
        self.dispatcher = dispatcher

    @staticmethod
    def mint() -> str:
        return secrets.token_urlsafe(TOKEN_BYTES)

    def resolve(self, token: str) -> OrderEntity:
        order = self.order_repo.find_by_token(token) if token else None
        if order is None:
            raise OrderNotFoundError()
        return order

    def resolve_public(self, token: str) -> dict[str, Any]:
        return self.presenter.present(self.resolve(token))

    def consume(self, token: str, decision: str, notes: str | None = None) -> OrderEntity:
        if decision not in TERMINAL_STATUSES:
            raise ValidationError("Invalid status", fields=["status"])
        if not token:
            raise OrderNotFoundError()

        # confirm() trava a linha e levanta AlreadyConfirmedError se já terminal
        order = self.order_repo.confirm(token, decision, notes, timezone.now())
        payload = self.presenter.present(order)
        logger.info("order.confirmed", order_id=order.id, status=order.status)

        event = OrderConfirmedEvent(
            order_id=order.id,
            client_id=order.client_id,
            status=order.status,
            order=payload,
        )
        transaction.on_commit(lambda: self.dispatcher.dispatch(event))
        return order
