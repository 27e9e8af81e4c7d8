from __future__ import annotations

from html import escape

import structlog

from order_bot.adapters.notifiers.email.brevo import BrevoEmail
from order_bot.core.application.ports.client_notifier import ClientNotifier
from order_bot.core.application.services.order_presenter import format_price
from order_bot.core.domain.events.events import OrderConfirmedEvent
from order_bot.core.domain.events.exceptions import NotificationError
from order_bot.core.domain.repositories.buyer_repository import BuyerRepository
from order_bot.core.domain.repositories.client_repository import ClientRepository
from order_bot.core.domain.repositories.order_repository import OrderRepository
from order_bot.core.utils.translations import get_translation, resolve_locale

logger = structlog.get_logger(__name__)


class OrderStatusEmailNotifier(ClientNotifier):
    """
    Avisa o lojista por e-mail quando o comprador aprova, recusa ou pede
    alteração. Falha aqui nunca desfaz a confirmação: só loga.
    """

    def __init__(
        self,
        email: BrevoEmail,
        order_repo: OrderRepository,
        client_repo: ClientRepository,
        buyer_repo: BuyerRepository,
        dashboard_url: str,
    ) -> None:
        self.email = email
        self.order_repo = order_repo
        self.client_repo = client_repo
        self.buyer_repo = buyer_repo
        self.dashboard_url = dashboard_url

    def build(self, order_id: int) -> tuple[str, str, str] | None:
        """Devolve (destinatário, assunto, html) ou None se não houver o que enviar."""
        order = self.order_repo.find_by_id(order_id)
        if order is None:
            return None
        client = self.client_repo.find_by_id(order.client_id)
        if client is None or not client.email:
            return None
        buyer = self.buyer_repo.find_by_id(order.buyer_id)

        locale = resolve_locale(client.language)
        status_label = get_translation(locale, f"status_{order.status}")
        subject = f"Order #{order.order_number} - {order.status.upper()}"
        heading = get_translation(locale, "email_order_update")
        rows = [
            ("Product", order.product_name),
            ("Quantity", order.quantity),
            ("Total", format_price(order.total_price)),
            ("Buyer", buyer.name if buyer else ""),
        ]
        if order.notes:
            rows.append(("Notes", order.notes))
        html = (
            f"<h2>{escape(heading)}</h2>"
            f"<p>#{escape(order.order_number)}: {escape(status_label)}</p>"
            "<table>"
            + "".join(f"<tr><th>{escape(k)}</th><td>{escape(str(v))}</td></tr>" for k, v in rows)
            + "</table>"
            f'<p><a href="{escape(self.dashboard_url)}">Open dashboard</a></p>'
        )
        return client.email, subject, html

    def notify_order_status(self, order_id: int) -> None:
        if not self.email.configured:
            logger.info("client_email.skipped", order_id=order_id, reason="not_configured")
            return
        built = self.build(order_id)
        if built is None:
            logger.warning("client_email.skipped", order_id=order_id, reason="missing_data")
            return
        recipient, subject, html = built
        try:
            self.email.send([recipient], subject, html)
        except NotificationError as exc:
            logger.error("client_email.failed", order_id=order_id, error=str(exc))

    def on_order_confirmed(self, event: OrderConfirmedEvent) -> None:
        self.notify_order_status(event.order_id)
