from collections.abc import Callable, Iterable

import structlog

from order_bot.core.domain.events.events import DomainEvent

logger = structlog.get_logger(__name__)

Listener = Callable[[DomainEvent], None]


class EventDispatcher:
    """
    Publicação síncrona de eventos do pedido (recebido, agendado, enviado,
    falhou, confirmado) para os sinks externos: realtime, e-mail, métricas.

    Um listener que explode é logado e pulado; os demais seguem e quem
    publicou nunca vê a exceção.
    """

    def __init__(self) -> None:
        self._listeners: dict[type[DomainEvent], list[Listener]] = {}

    def subscribe(self, event_type: type[DomainEvent], listener: Listener) -> None:
        self._listeners.setdefault(event_type, []).append(listener)
        logger.debug("event.subscribed", event_type=event_type.__name__, listener=_label(listener))

    def listeners_for(self, event_type: type[DomainEvent]) -> list[Listener]:
        return list(self._listeners.get(event_type, ()))

    def dispatch(self, event: DomainEvent) -> None:
        name = type(event).__name__
        listeners = self.listeners_for(type(event))
        logger.info("event.dispatch", event_name=name, order_id=getattr(event, "order_id", None),
                    listeners=len(listeners))
        for listener in listeners:
            try:
                listener(event)
            except Exception as exc:
                logger.error(
                    "event.listener_error",
                    event_name=name,
                    listener=_label(listener),
                    error=str(exc),
                    exc_info=True,
                )

    def dispatch_all(self, events: Iterable[object]) -> None:
        """Publica só o que for DomainEvent; o resto (entidades, dicts) é ignorado."""
        for event in events:
            if isinstance(event, DomainEvent):
                self.dispatch(event)


def _label(listener: Callable) -> str:
    owner = getattr(listener, "__self__", None)
    name = getattr(listener, "__name__", type(listener).__name__)
    return f"{type(owner).__name__}.{name}" if owner is not None else name
