from __future__ import annotations

from collections.abc import Callable
from datetime import timedelta
from typing import Any

import structlog
from django.db import transaction
from django.utils import timezone

from order_bot.core.application.commands.notification_commands import (
    DispatchNotificationCommand,
    SweepUnsentOrdersCommand,
)
from order_bot.core.application.cqrs import CommandHandler
from order_bot.core.application.dtos.notification_job_dto import NotificationJobDTO, RetryPolicy
from order_bot.core.application.ports.channel_sender import ChannelSender
from order_bot.core.application.services.notification_scheduler import NotificationScheduler
from order_bot.core.domain.entities.message_entity import MessageEntity
from order_bot.core.domain.events.events import (
    NotificationFailedEvent,
    NotificationScheduledEvent,
    NotificationSentEvent,
)
from order_bot.core.domain.events.exceptions import ChannelUnavailable, DeliveryFailure, NotificationError
from order_bot.core.domain.repositories.bot_settings_repository import BotSettingsRepository
from order_bot.core.domain.repositories.buyer_repository import BuyerRepository
from order_bot.core.domain.repositories.message_repository import MessageRepository
from order_bot.core.domain.repositories.order_repository import OrderRepository
from order_bot.core.domain.services.event_dispatcher import EventDispatcher

logger = structlog.get_logger(__name__)


# ╭──────────────────────────────────────────────╮
# │ Envio (uma tentativa de um job)             │
# ╰──────────────────────────────────────────────╯
class DispatchNotificationHandler(CommandHandler[DispatchNotificationCommand]):
    """
    claimed → (adapter) → sent | failed(error)

    Cada tentativa grava sua própria linha em Message. Em sucesso, Message
    `sent` e a flag `*_sent` do pedido são gravadas na mesma transação.
    Em falha a exceção sobe para a camada de fila, que decide a retentativa.
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        message_repo: MessageRepository,
        sender_factory: Callable[[str], ChannelSender],
        dispatcher: EventDispatcher,
    ) -> None:
        self.order_repo = order_repo
        self.message_repo = message_repo
        self.sender_factory = sender_factory
        self.dispatcher = dispatcher

    def handle(self, cmd: DispatchNotificationCommand) -> dict[str, Any]:
        job = cmd.job
        log = logger.bind(order_id=job.order_id, channel=job.channel, attempt=cmd.attempt)

        order = self.order_repo.find_by_id(job.order_id)
        if order is None:
            log.warning("dispatch.skipped", reason="order_missing")
            return {"status": "skipped", "reason": "order_missing"}
        if order.is_sent(job.channel):
            log.info("dispatch.skipped", reason="already_sent")
            return {"status": "skipped", "reason": "already_sent"}
        if not order.is_pending:
            # comprador já decidiu: não faz sentido pedir confirmação
            log.info("dispatch.skipped", reason="order_confirmed", order_status=order.status)
            return {"status": "skipped", "reason": "order_confirmed"}

        message = self.message_repo.create_pending(
            order_id=job.order_id,
            client_id=job.client_id,
            buyer_id=job.buyer_id,
            channel=job.channel,
            phone=job.phone,
            content=job.message,
            attempt=cmd.attempt,
        )

        try:
            sender = self.sender_factory(job.channel)
            if not sender.is_ready():
                raise ChannelUnavailable(f"{job.channel} channel is not ready")
            provider_id = sender.send(job.phone, job.message)
        except NotificationError as exc:
            self._record_failure(message, job, cmd.attempt, exc)
            raise
        except Exception as exc:
            failure = DeliveryFailure(f"{type(exc).__name__}: {exc}")
            self._record_failure(message, job, cmd.attempt, failure)
            raise failure from exc

        sent_at = timezone.now()
        with transaction.atomic():
            self.message_repo.mark_sent(message.id, sent_at)
            flipped = self.order_repo.mark_sent(job.order_id, job.channel, sent_at)

        log.info("dispatch.sent", message_id=message.id, provider_id=provider_id, flag_flipped=flipped)
        self.dispatcher.dispatch(
            NotificationSentEvent(
                order_id=job.order_id,
                message_id=message.id,
                channel=job.channel,
                attempt=cmd.attempt,
                sent_at=sent_at,
            )
        )
        return {"status": "sent", "message_id": message.id, "flag_flipped": flipped}

    def _record_failure(
        self, message: MessageEntity, job: NotificationJobDTO, attempt: int, exc: Exception
    ) -> None:
        self.message_repo.mark_failed(message.id, str(exc))
        logger.warning(
            "dispatch.failed",
            order_id=job.order_id,
            channel=job.channel,
            attempt=attempt,
            message_id=message.id,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        self.dispatcher.dispatch(
            NotificationFailedEvent(
                order_id=job.order_id,
                message_id=message.id,
                channel=job.channel,
                attempt=attempt,
                error=str(exc),
            )
        )


# ╭──────────────────────────────────────────────╮
# │ Monitor (varredura de segurança)            │
# ╰──────────────────────────────────────────────╯
class SweepUnsentOrdersHandler(CommandHandler[SweepUnsentOrdersCommand]):
    """
    Reagenda pedidos `pending` cujo envio nunca foi agendado ou cujo job
    já deveria ter terminado (devido há mais de `stale_minutes`).

    A decisão usa `*_sent` e `*_scheduled_at`, não a fila: um job apenas
    atrasado não é reagendado. Canais que já consumiram
    `max_attempts * (1 + max_redrives)` tentativas são deixados de lado.
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        buyer_repo: BuyerRepository,
        bot_settings_repo: BotSettingsRepository,
        message_repo: MessageRepository,
        scheduler: NotificationScheduler,
        retry_policy: RetryPolicy,
        stale_minutes: int = 15,
        max_redrives: int = 3,
        max_age_hours: int = 48,
    ) -> None:
        self.order_repo = order_repo
        self.buyer_repo = buyer_repo
        self.bot_settings_repo = bot_settings_repo
        self.message_repo = message_repo
        self.scheduler = scheduler
        self.retry_policy = retry_policy
        self.stale_minutes = stale_minutes
        self.max_redrives = max_redrives
        self.max_age_hours = max_age_hours

    @property
    def attempt_cap(self) -> int:
        return self.retry_policy.max_attempts * (1 + self.max_redrives)

    def handle(self, cmd: SweepUnsentOrdersCommand) -> list[NotificationScheduledEvent]:
        now = timezone.now()
        stale_before = now - timedelta(minutes=self.stale_minutes)
        orders = self.order_repo.find_needing_notification(
            stale_before=stale_before,
            created_after=now - timedelta(hours=self.max_age_hours),
            limit=cmd.batch_size,
        )

        events: list[NotificationScheduledEvent] = []
        for order in orders:
            try:
                bot_settings = self.bot_settings_repo.get_or_create(order.client_id)
                channels = [
                    ch for ch in bot_settings.enabled_channels()
                    if not order.is_sent(ch)
                    and (order.scheduled_at(ch) is None or order.scheduled_at(ch) < stale_before)
                    and self.message_repo.count_attempts(order.id, ch) < self.attempt_cap
                ]
                if not channels:
                    continue
                buyer = self.buyer_repo.find_by_id(order.buyer_id)
                if buyer is None:
                    logger.error("monitor.buyer_missing", order_id=order.id)
                    continue
                events.extend(
                    self.scheduler.schedule(order, buyer, channels=channels, anchor=order.created_at)
                )
            except Exception as exc:
                logger.error("monitor.redrive_failed", order_id=order.id, error=str(exc), exc_info=True)

        logger.info("monitor.sweep_done", scanned=len(orders), redriven=len(events))
        return events
