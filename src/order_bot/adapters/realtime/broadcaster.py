from __future__ import annotations

from typing import Any

import structlog
from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

from order_bot.core.application.ports.order_broadcaster import OrderBroadcaster
from order_bot.core.domain.events.events import OrderConfirmedEvent

logger = structlog.get_logger(__name__)

ALL_ORDERS_GROUP = "order-updates"


def client_group(client_id: int | str) -> str:
    return f"{ALL_ORDERS_GROUP}.client.{client_id}"


class ChannelsOrderBroadcaster(OrderBroadcaster):
    """
    Publica o pedido no channel layer: grupo global + grupo do lojista.
    Fire-and-forget: erro do layer é logado e não sobe.
    """

    def __init__(self, layer_alias: str = "default") -> None:
        self.layer_alias = layer_alias

    def broadcast(self, order: dict[str, Any]) -> None:
        layer = get_channel_layer(self.layer_alias)
        if layer is None:
            logger.warning("broadcast.no_layer", order_id=order.get("id"))
            return
        message = {"type": "order.update", "order": order}
        groups = [ALL_ORDERS_GROUP]
        if order.get("client_id") is not None:
            groups.append(client_group(order["client_id"]))
        try:
            for group in groups:
                async_to_sync(layer.group_send)(group, message)
        except Exception as exc:
            logger.error("broadcast.failed", order_id=order.get("id"), error=str(exc))
            return
        logger.info("broadcast.sent", order_id=order.get("id"), groups=groups)

    def on_order_confirmed(self, event: OrderConfirmedEvent) -> None:
        self.broadcast(event.order)
