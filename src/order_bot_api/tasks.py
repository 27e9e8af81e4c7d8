from __future__ import annotations

import time
from contextlib import contextmanager

import structlog
from celery import Task, shared_task
from django.conf import settings
from django.core.cache import cache

from order_bot.adapters.config import composition_root
from order_bot.adapters.observability.metrics import DISPATCH_ABANDONED
from order_bot.core.application.commands.notification_commands import (
    DispatchNotificationCommand,
    SweepUnsentOrdersCommand,
)
from order_bot.core.application.dtos.notification_job_dto import NotificationJobDTO
from order_bot.core.domain.events.exceptions import NotificationError

log = structlog.get_logger(__name__)

# ──────────────────────────────────────────────────────────────────────────
# Constantes de filas e parâmetros
# ──────────────────────────────────────────────────────────────────────────
QUEUE_WHATSAPP     = "whatsapp"
QUEUE_SMS          = "sms"
QUEUE_MONITOR      = "monitor"
QUEUE_EMAIL        = "email"
SWEEP_LOCK_TTL_SEC = 5 * 60    # varredura nunca deve passar disso

# ──────────────────────────────────────────────────────────────────────────
# Base Task: loga a falha definitiva (exceções fora do fluxo de retentativa)
# ──────────────────────────────────────────────────────────────────────────
class BaseOrderBotTask(Task):
    def on_failure(self, exc, task_id, args, kwargs, einfo):
        log.critical(
            "task.failed",
            task=self.name, task_id=task_id, error=str(exc),
        )
        super().on_failure(exc, task_id, args, kwargs, einfo)

# ──────────────────────────────────────────────────────────────────────────
# Lock distribuído (evita duas varreduras simultâneas)
# ──────────────────────────────────────────────────────────────────────────
@contextmanager
def task_lock(name: str, ttl: int):
    """
    Usa o backend de cache (Redis em produção) como mutex com expiração.
    """
    key = f"locks:order_bot:{name}"
    acquired = cache.add(key, str(time.time()), ttl)  # True se adicionou a chave (lock obtido)
    try:
        yield acquired
    finally:
        if acquired:
            cache.delete(key)

def _command_bus():
    return composition_root.container.command_bus()

# ──────────────────────────────────────────────────────────────────────────
# Workers de envio (um por canal, fila própria)
# ──────────────────────────────────────────────────────────────────────────
def _dispatch(task: Task, payload: dict, channel: str) -> dict:
    """
    Uma tentativa de envio. Falha de canal → retentativa com backoff
    exponencial até `max_attempts`; depois disso o job é abandonado
    (a linha `failed` em Message fica como registro).
    """
    job = NotificationJobDTO.model_validate(payload)
    attempt = task.request.retries + 1
    policy = job.retry_policy

    try:
        return _command_bus().dispatch(DispatchNotificationCommand(job=job, attempt=attempt))
    except NotificationError as exc:
        if policy.has_attempts_left(attempt):
            countdown = policy.countdown_for(attempt)
            log.warning(
                "dispatch.retry_scheduled",
                order_id=job.order_id, channel=channel, attempt=attempt, countdown=countdown,
            )
            raise task.retry(countdown=countdown, exc=exc)  # noqa: B904

        log.critical(
            "dispatch.abandoned",
            order_id=job.order_id, channel=channel, attempts=attempt, error=str(exc),
        )
        DISPATCH_ABANDONED.labels(channel).inc()
        return {"status": "abandoned", "order_id": job.order_id, "channel": channel, "attempts": attempt}


@shared_task(
    base=BaseOrderBotTask, bind=True, max_retries=None,
    acks_late=True, queue=QUEUE_WHATSAPP,
)
def dispatch_whatsapp_notification(self, job: dict):
    return _dispatch(self, job, "whatsapp")


@shared_task(
    base=BaseOrderBotTask, bind=True, max_retries=None,
    acks_late=True, queue=QUEUE_SMS,
)
def dispatch_sms_notification(self, job: dict):
    return _dispatch(self, job, "sms")

# ──────────────────────────────────────────────────────────────────────────
# Monitor: re-agenda pedidos pendentes cujo envio nunca saiu
# ──────────────────────────────────────────────────────────────────────────
@shared_task(base=BaseOrderBotTask, bind=True, acks_late=True, queue=QUEUE_MONITOR)
def sweep_unsent_orders(self, batch_size: int | None = None):
    with task_lock("monitor:sweep", SWEEP_LOCK_TTL_SEC) as ok:
        if not ok:
            log.info("monitor.sweep_busy")
            return {"status": "busy", "redriven": 0}

        size = batch_size or settings.ORDER_MONITOR_BATCH_SIZE
        events = _command_bus().dispatch(SweepUnsentOrdersCommand(batch_size=size))
        return {"status": "ok", "redriven": len(events)}


# ──────────────────────────────────────────────────────────────────────────
# E-mail ao lojista após a decisão do comprador
# ──────────────────────────────────────────────────────────────────────────
@shared_task(base=BaseOrderBotTask, bind=True, acks_late=True, queue=QUEUE_EMAIL)
def notify_client_order_status(self, order_id: int):
    # falha do provedor já é logada (e engolida) pelo notifier
    composition_root.container.order_status_email().notify_order_status(order_id)
    return {"status": "done", "order_id": order_id}
