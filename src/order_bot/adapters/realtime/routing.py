from django.urls import path

from order_bot.adapters.realtime.consumers import OrderUpdatesConsumer

websocket_urlpatterns = [
    path("ws/orders/", OrderUpdatesConsumer.as_asgi()),
    path("ws/orders/<int:client_id>/", OrderUpdatesConsumer.as_asgi()),
]
