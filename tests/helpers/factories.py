"""
Fábricas de dados e dublês usados pelos testes.
"""
from __future__ import annotations

import secrets
from decimal import Decimal
from typing import Any

from order_bot.adapters.config.composition_root import container as ob_container
from order_bot.core.application.ports.channel_sender import ChannelSender
from plugins.django_interface.models import BotSettings, Buyer, Client, Order


def make_client(**overrides: Any) -> Client:
    data = {
        "name": "Karim",
        "email": f"client-{secrets.token_hex(4)}@shop.example.com",
        "company_name": "Atlas Store",
        "phone": "213555999000",
        "language": "en",
    }
    data.update(overrides)
    return Client.objects.create(**data)


def make_bot_settings(client: Client, **overrides: Any) -> BotSettings:
    bs, _ = BotSettings.objects.get_or_create(client=client)
    for k, v in overrides.items():
        setattr(bs, k, v)
    bs.save()
    return bs


def make_buyer(client: Client, **overrides: Any) -> Buyer:
    data = {"name": "Ali", "phone": "213555000111"}
    data.update(overrides)
    return Buyer.objects.create(client=client, **data)


def make_order(client: Client, buyer: Buyer | None = None, **overrides: Any) -> Order:
    buyer = buyer or make_buyer(client)
    data = {
        "order_number": f"ORD-{secrets.token_hex(4).upper()}",
        "product_name": "Widget",
        "quantity": 2,
        "total_price": Decimal("500"),
        "confirmation_token": secrets.token_urlsafe(32),
    }
    data.update(overrides)
    return Order.objects.create(client=client, buyer=buyer, **data)


def webhook_payload(client_id: int, **overrides: Any) -> dict[str, Any]:
    data = {
        "client_id": client_id,
        "order_number": f"ORD-{secrets.token_hex(4).upper()}",
        "buyer": {"name": "Ali", "phone": "213555000111"},
        "product_name": "Widget",
        "quantity": 2,
        "total_price": 500,
    }
    data.update(overrides)
    return data


class FakeSender(ChannelSender):
    """
    Sender roteirizado: cada item de `outcomes` é consumido por uma chamada
    a `send`; exceções são levantadas, qualquer outro valor é o id devolvido.
    """

    def __init__(self, channel: str = "whatsapp", outcomes: list | None = None, ready: bool = True) -> None:
        self.channel = channel
        self.outcomes = list(outcomes or [])
        self.ready = ready
        self.calls: list[tuple[str, str]] = []

    def is_ready(self) -> bool:
        return self.ready

    def send(self, phone: str, message: str) -> str | None:
        self.calls.append((phone, message))
        outcome = self.outcomes.pop(0) if self.outcomes else "provider-id"
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def memory_queue():
    return ob_container.queue_client()


def registered_handler(command_type: type):
    """Handler efetivamente registrado no CommandBus para `command_type`."""
    return ob_container.command_bus()._handlers[command_type]
