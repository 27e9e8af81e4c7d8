from __future__ import annotations

from datetime import datetime, timedelta

import structlog
from django.utils import timezone

from order_bot.core.application.dtos.notification_job_dto import NotificationJobDTO, RetryPolicy
from order_bot.core.application.ports.queue_client import QueueClient
from order_bot.core.application.services.order_presenter import format_price
from order_bot.core.domain.entities.bot_settings_entity import BotSettingsEntity
from order_bot.core.domain.entities.buyer_entity import BuyerEntity
from order_bot.core.domain.entities.client_entity import ClientEntity
from order_bot.core.domain.entities.order_entity import OrderEntity
from order_bot.core.domain.events.events import NotificationScheduledEvent
from order_bot.core.domain.events.exceptions import ClientNotFoundError, SchedulingError, TemplateError
from order_bot.core.domain.repositories.bot_settings_repository import BotSettingsRepository
from order_bot.core.domain.repositories.client_repository import ClientRepository
from order_bot.core.domain.repositories.order_repository import OrderRepository
from order_bot.core.utils.template_utils import TemplateContext, render_message
from order_bot.core.utils.translations import default_template, resolve_locale

logger = structlog.get_logger(__name__)


class NotificationScheduler:
    """
    Decide quais canais disparam e quando, e entrega os jobs atrasados à fila.

    WhatsApp sempre; SMS apenas com `sms_enabled`. Falha de enfileiramento
    não é retentada aqui: sobe como SchedulingError para quem chamou.
    """

    def __init__(
        self,
        client_repo: ClientRepository,
        bot_settings_repo: BotSettingsRepository,
        order_repo: OrderRepository,
        queue_client: QueueClient,
        retry_policy: RetryPolicy,
        base_url: str,
    ) -> None:
        self.client_repo = client_repo
        self.bot_settings_repo = bot_settings_repo
        self.order_repo = order_repo
        self.queue_client = queue_client
        self.retry_policy = retry_policy
        self.base_url = base_url

    # ------------------------------------------------------------------
    def build_context(
        self,
        order: OrderEntity,
        buyer: BuyerEntity,
        client: ClientEntity,
        bot_settings: BotSettingsEntity,
    ) -> TemplateContext:
        return TemplateContext.build(
            buyer_name=buyer.name,
            order_number=order.order_number,
            product_name=order.product_name,
            quantity=order.quantity,
            total_price=format_price(order.total_price),
            confirmation_link=order.confirmation_link(self.base_url),
            company_name=bot_settings.company_name or client.display_name,
            support_phone=bot_settings.support_phone or client.phone,
            store_url=bot_settings.store_url,
        )

    def render(
        self,
        channel: str,
        context: TemplateContext,
        client: ClientEntity,
        bot_settings: BotSettingsEntity,
    ) -> str:
        """
        Template do cliente ou o padrão do idioma. Um template salvo que não
        renderiza cai no padrão: o pedido nunca fica sem mensagem por isso.
        """
        locale = resolve_locale(bot_settings.language, client.language)
        custom = bot_settings.template_for(channel)
        if custom:
            try:
                return render_message(custom, context)
            except TemplateError as exc:
                logger.warning(
                    "schedule.template_fallback",
                    client_id=client.id,
                    channel=channel,
                    error=str(exc),
                )
        return render_message(default_template(channel, locale), context)

    # ------------------------------------------------------------------
    def schedule(
        self,
        order: OrderEntity,
        buyer: BuyerEntity,
        channels: list[str] | None = None,
        anchor: datetime | None = None,
    ) -> list[NotificationScheduledEvent]:
        """
        Enfileira um job por canal habilitado.

        Sem `anchor` o atraso conta a partir de agora (ingestão). Com `anchor`
        (reprocessamento pelo monitor) conta a partir dele, nunca negativo.
        """
        client = self.client_repo.find_by_id(order.client_id)
        if client is None:
            raise ClientNotFoundError(order.client_id)
        bot_settings = self.bot_settings_repo.get_or_create(client.id)

        enabled = bot_settings.enabled_channels()
        targets = [c for c in (channels or enabled) if c in enabled]
        context = self.build_context(order, buyer, client, bot_settings)

        events: list[NotificationScheduledEvent] = []
        for channel in targets:
            message = self.render(channel, context, client, bot_settings)
            countdown = self._countdown(bot_settings.delay_minutes_for(channel), anchor)
            job = NotificationJobDTO(
                order_id=order.id,
                client_id=order.client_id,
                buyer_id=buyer.id,
                channel=channel,
                phone=buyer.phone,
                message=message,
                max_attempts=self.retry_policy.max_attempts,
                backoff_seconds=self.retry_policy.base_delay_seconds,
            )
            try:
                job_id = self.queue_client.enqueue(job, countdown=countdown)
            except SchedulingError:
                raise
            except Exception as exc:
                logger.error("schedule.enqueue_failed", order_id=order.id, channel=channel, error=str(exc))
                raise SchedulingError(f"Failed to enqueue {channel} notification: {exc}", channel=channel) from exc

            eta = timezone.now() + timedelta(seconds=countdown)
            self.order_repo.mark_scheduled(order.id, channel, eta)
            logger.info(
                "schedule.enqueued",
                order_id=order.id,
                channel=channel,
                job_id=job_id,
                countdown=countdown,
                redrive=anchor is not None,
            )
            events.append(
                NotificationScheduledEvent(
                    order_id=order.id,
                    client_id=order.client_id,
                    channel=channel,
                    scheduled_for=eta,
                    redrive=anchor is not None,
                )
            )
        return events

    @staticmethod
    def _countdown(delay_minutes: int, anchor: datetime | None) -> int:
        delay = int(delay_minutes) * 60
        if anchor is None:
            return delay
        remaining = (anchor + timedelta(seconds=delay) - timezone.now()).total_seconds()
        return max(0, int(remaining))
