"""
Métricas de negócio do order-bot (registry padrão, exportado em /metrics
pelo django-prometheus).
"""
from prometheus_client import Counter

from order_bot.core.domain.events.events import (
    NotificationFailedEvent,
    NotificationScheduledEvent,
    NotificationSentEvent,
    OrderConfirmedEvent,
    OrderReceivedEvent,
)

ORDERS_RECEIVED = Counter(
    "order_bot_orders_received_total",
    "Pedidos recebidos pelo webhook",
)

ORDERS_CONFIRMED = Counter(
    "order_bot_orders_confirmed_total",
    "Decisões do comprador",
    ["status"],
)

NOTIFICATIONS_SCHEDULED = Counter(
    "order_bot_notifications_scheduled_total",
    "Jobs de envio enfileirados",
    ["channel", "redrive"],
)

DISPATCH_OUTCOMES = Counter(
    "order_bot_dispatch_total",
    "Resultado de cada tentativa de envio",
    ["channel", "outcome"],
)

DISPATCH_ABANDONED = Counter(
    "order_bot_dispatch_abandoned_total",
    "Jobs que esgotaram as tentativas",
    ["channel"],
)


# ───────────────────────────────────────────────
# assinantes do EventDispatcher
# ───────────────────────────────────────────────
def on_order_received(_: OrderReceivedEvent) -> None:
    ORDERS_RECEIVED.inc()


def on_order_confirmed(event: OrderConfirmedEvent) -> None:
    ORDERS_CONFIRMED.labels(event.status).inc()


def on_notification_scheduled(event: NotificationScheduledEvent) -> None:
    NOTIFICATIONS_SCHEDULED.labels(event.channel, str(event.redrive).lower()).inc()


def on_notification_sent(event: NotificationSentEvent) -> None:
    DISPATCH_OUTCOMES.labels(event.channel, "sent").inc()


def on_notification_failed(event: NotificationFailedEvent) -> None:
    DISPATCH_OUTCOMES.labels(event.channel, "failed").inc()
