from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from order_bot.core.application.cqrs import PagedResult
from order_bot.core.domain.entities.order_entity import OrderEntity


class OrderRepository(ABC):
    @abstractmethod
    def create(self, data: dict[str, Any]) -> OrderEntity:
        """Cria o pedido em `pending`. Violação de unicidade → PersistenceError."""
        ...

    @abstractmethod
    def find_by_id(self, order_id: int) -> OrderEntity | None:
        ...

    @abstractmethod
    def find_by_token(self, token: str) -> OrderEntity | None:
        ...

    @abstractmethod
    def exists_order_number(self, order_number: str) -> bool:
        ...

    @abstractmethod
    def confirm(self, token: str, status: str, notes: str | None, confirmed_at: datetime) -> OrderEntity:
        """
        Transição `pending` → terminal sob lock de linha.
        Token desconhecido → OrderNotFoundError; já confirmado → AlreadyConfirmedError.
        """
        ...

    @abstractmethod
    def mark_scheduled(self, order_id: int, channel: str, eta: datetime) -> None:
        ...

    @abstractmethod
    def mark_sent(self, order_id: int, channel: str, sent_at: datetime) -> bool:
        """Flag monotônica. Retorna True apenas se esta chamada virou a flag."""
        ...

    @abstractmethod
    def find_needing_notification(
        self, stale_before: datetime, created_after: datetime, limit: int
    ) -> list[OrderEntity]:
        """Pedidos `pending` recentes com algum canal não enviado e nunca/há muito agendado."""
        ...

    @abstractmethod
    def search(
        self, client_id: int, filtros: dict[str, Any] | None, page: int, page_size: int
    ) -> PagedResult[OrderEntity]:
        ...
