"""
Projeções do pedido para fora do core.

`public_order` é o que um portador do token (não autenticado) pode ver:
nada de telefone, e-mail, endereço, notas internas ou o próprio token.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any

from order_bot.core.domain.entities.order_entity import OrderEntity
from order_bot.core.domain.repositories.bot_settings_repository import BotSettingsRepository
from order_bot.core.domain.repositories.buyer_repository import BuyerRepository
from order_bot.core.domain.repositories.client_repository import ClientRepository


def format_price(value: Decimal | int | float | str | None) -> str:
    """500.00 → '500'; 499.90 → '499.90'."""
    if value is None:
        return ""
    d = Decimal(str(value))
    if d == d.to_integral_value():
        return str(d.quantize(Decimal(1)))
    return f"{d:.2f}"


def _iso(value) -> str | None:
    return value.isoformat() if value else None


def public_order(order: OrderEntity, buyer_name: str = "", company_name: str = "") -> dict[str, Any]:
    return {
        "id": order.id,
        "client_id": order.client_id,
        "order_number": order.order_number,
        "product_name": order.product_name,
        "quantity": order.quantity,
        "total_price": format_price(order.total_price),
        "status": order.status,
        "notes": order.notes,
        "confirmed_at": _iso(order.confirmed_at),
        "created_at": _iso(order.created_at),
        "buyer_name": buyer_name,
        "company_name": company_name,
    }


class OrderPresenter:
    def __init__(
        self,
        buyer_repo: BuyerRepository,
        client_repo: ClientRepository,
        bot_settings_repo: BotSettingsRepository,
    ) -> None:
        self.buyer_repo = buyer_repo
        self.client_repo = client_repo
        self.bot_settings_repo = bot_settings_repo

    def present(self, order: OrderEntity) -> dict[str, Any]:
        buyer = self.buyer_repo.find_by_id(order.buyer_id)
        client = self.client_repo.find_by_id(order.client_id)
        company = ""
        if client:
            bs = self.bot_settings_repo.get_or_create(client.id)
            company = bs.company_name or client.display_name
        return public_order(order, buyer.name if buyer else "", company)
