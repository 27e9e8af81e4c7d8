from unittest import mock

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.test import SimpleTestCase

from order_bot.adapters.realtime.broadcaster import ALL_ORDERS_GROUP, ChannelsOrderBroadcaster, client_group
from order_bot.adapters.realtime.consumers import OrderUpdatesConsumer


class BroadcasterTests(SimpleTestCase):
    def setUp(self):
        self.layer = get_channel_layer()

    def _join(self, group: str) -> str:
        channel = async_to_sync(self.layer.new_channel)()
        async_to_sync(self.layer.group_add)(group, channel)
        return channel

    def test_order_reaches_global_and_client_groups(self):
        everyone = self._join(ALL_ORDERS_GROUP)
        shop = self._join(client_group(42))

        ChannelsOrderBroadcaster().broadcast({"id": 7, "client_id": 42, "status": "approved"})

        for channel in (everyone, shop):
            message = async_to_sync(self.layer.receive)(channel)
            self.assertEqual(message["type"], "order.update")
            self.assertEqual(message["order"]["id"], 7)

    def test_layer_errors_do_not_propagate(self):
        broken = mock.Mock()
        broken.group_send = mock.AsyncMock(side_effect=ConnectionError("redis down"))
        with mock.patch("order_bot.adapters.realtime.broadcaster.get_channel_layer", return_value=broken):
            ChannelsOrderBroadcaster().broadcast({"id": 1, "client_id": 1})

        broken.group_send.assert_awaited_once()


class ConsumerTests(SimpleTestCase):
    def test_forwards_update_as_json_frame(self):
        consumer = OrderUpdatesConsumer()
        consumer.send_json = mock.Mock()

        consumer.order_update({"type": "order.update", "order": {"id": 3}})

        consumer.send_json.assert_called_once_with({"type": "order-update", "order": {"id": 3}})

    def test_connect_joins_client_group(self):
        consumer = OrderUpdatesConsumer()
        consumer.scope = {"url_route": {"kwargs": {"client_id": 5}}}
        consumer.channel_name = "test-channel"
        consumer.channel_layer = mock.Mock()
        consumer.channel_layer.group_add = mock.AsyncMock()
        consumer.accept = mock.Mock()

        consumer.connect()

        consumer.channel_layer.group_add.assert_awaited_once_with(client_group(5), "test-channel")
        consumer.accept.assert_called_once()
