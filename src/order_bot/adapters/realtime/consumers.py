from asgiref.sync import async_to_sync
from channels.generic.websocket import JsonWebsocketConsumer

from order_bot.adapters.realtime.broadcaster import ALL_ORDERS_GROUP, client_group


class OrderUpdatesConsumer(JsonWebsocketConsumer):
    """
    /ws/orders/             → todos os pedidos
    /ws/orders/<client_id>/ → só os pedidos do lojista
    """

    def connect(self):
        client_id = self.scope["url_route"]["kwargs"].get("client_id")
        self.group_name = client_group(client_id) if client_id is not None else ALL_ORDERS_GROUP
        async_to_sync(self.channel_layer.group_add)(self.group_name, self.channel_name)
        self.accept()

    def disconnect(self, code):
        async_to_sync(self.channel_layer.group_discard)(self.group_name, self.channel_name)

    # "order.update" → order_update
    def order_update(self, event):
        self.send_json({"type": "order-update", "order": event["order"]})
