from __future__ import annotations

import math
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, Protocol, TypeVar

import structlog

from order_bot.core.domain.events.events import DomainEvent
from order_bot.core.domain.services.event_dispatcher import EventDispatcher

C = TypeVar("C")  # comando
Q = TypeVar("Q")  # filtros da query
R = TypeVar("R")  # resultado da query
T = TypeVar("T")  # item paginado

logger = structlog.get_logger(__name__)

# ───────────────────────────────────────────────
# Mensagens
# ───────────────────────────────────────────────
@dataclass(frozen=True)
class CommandDTO:
    """Base dos comandos (webhook, confirmação, envio, varredura, settings)."""


@dataclass(frozen=True)
class QueryDTO(Generic[Q]):
    filtros: Q


@dataclass(frozen=True)
class PaginatedQueryDTO(Generic[Q]):
    filtros: Q
    page: int = 1
    page_size: int = 50


@dataclass(frozen=True)
class PagedResult(Generic[T]):
    items: Sequence[T]
    total: int
    page: int
    page_size: int
    total_pages: int = field(init=False)

    def __post_init__(self):
        pages = math.ceil(self.total / self.page_size) if self.page_size else 0
        object.__setattr__(self, "total_pages", pages)


class CommandHandler(Protocol, Generic[C]):
    def handle(self, command: C) -> Any: ...


class QueryHandler(Protocol, Generic[Q, R]):
    def handle(self, query: QueryDTO[Q]) -> R: ...


# ───────────────────────────────────────────────
# Buses
# ───────────────────────────────────────────────
class _Bus:
    """Roteia pela classe exata da mensagem e loga a duração do handler."""

    kind = "message"

    def __init__(self) -> None:
        self._handlers: dict[type, Any] = {}

    def register(self, message_type: type, handler: Any) -> None:
        if message_type in self._handlers:
            logger.warning(f"{self.kind}_bus.replaced", message=message_type.__name__)
        self._handlers[message_type] = handler
        logger.debug(f"{self.kind}_bus.registered", message=message_type.__name__)

    def _run(self, message: Any) -> Any:
        name = type(message).__name__
        handler = self._handlers.get(type(message))
        if handler is None:
            raise ValueError(f"Nenhum handler de {self.kind} para: {name}")
        start = time.perf_counter()
        try:
            return handler.handle(message)
        finally:
            logger.debug(f"{self.kind}.executed", name=name, duration=f"{time.perf_counter() - start:.3f}s")


class CommandBus(_Bus):
    kind = "command"

    def dispatch(self, command: Any) -> Any:
        return self._run(command)


class QueryBus(_Bus):
    kind = "query"

    def dispatch(self, query: Any) -> Any:
        return self._run(query)


class CommandBusImpl(CommandBus):
    """
    Além de executar, publica os eventos devolvidos pelo handler
    (um DomainEvent ou uma lista/tupla que contenha eventos).
    """

    def __init__(self, dispatcher: EventDispatcher):
        super().__init__()
        self.dispatcher = dispatcher

    def dispatch(self, command: Any) -> Any:
        result = super().dispatch(command)
        if isinstance(result, DomainEvent):
            self.dispatcher.dispatch(result)
        elif isinstance(result, list | tuple):
            self.dispatcher.dispatch_all(result)
        return result


class QueryBusImpl(QueryBus):
    pass
