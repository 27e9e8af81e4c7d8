"""
Implementações da porta QueueClient.

- CeleryQueueClient: produção; publica no broker com `countdown` (o broker
  acorda o job na hora certa, sem busy-wait) e fila própria por canal.
- InMemoryQueueClient: processo único / testes; apenas registra os jobs.
- CeleryClientNotifier: e-mail ao lojista publicado na fila `email`.
"""
from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass

import structlog
from celery import Celery, current_app

from order_bot.core.application.dtos.notification_job_dto import NotificationJobDTO
from order_bot.core.application.ports.client_notifier import ClientNotifier
from order_bot.core.application.ports.queue_client import QueueClient
from order_bot.core.domain.events.events import OrderConfirmedEvent
from order_bot.core.domain.events.exceptions import SchedulingError

logger = structlog.get_logger(__name__)

DISPATCH_TASKS = {
    "whatsapp": "order_bot_api.tasks.dispatch_whatsapp_notification",
    "sms": "order_bot_api.tasks.dispatch_sms_notification",
}
CLIENT_EMAIL_TASK = "order_bot_api.tasks.notify_client_order_status"
CLIENT_EMAIL_QUEUE = "email"


class CeleryQueueClient(QueueClient):
    def __init__(self, app: Celery | None = None) -> None:
        self._app = app

    @property
    def app(self) -> Celery:
        return self._app or current_app

    def enqueue(self, job: NotificationJobDTO, countdown: int) -> str:
        try:
            result = self.app.send_task(
                DISPATCH_TASKS[job.channel],
                kwargs={"job": job.model_dump(mode="json")},
                countdown=countdown,
                queue=job.channel,
                routing_key=job.channel,
            )
        except Exception as exc:
            raise SchedulingError(f"Broker rejected {job.channel} job: {exc}", channel=job.channel) from exc
        return result.id


class CeleryClientNotifier(ClientNotifier):
    """
    Tira o e-mail ao lojista do request de confirmação: só publica um job na
    fila `email`, e o worker chama o OrderStatusEmailNotifier.
    """

    def __init__(self, app: Celery | None = None) -> None:
        self._app = app

    @property
    def app(self) -> Celery:
        return self._app or current_app

    def notify_order_status(self, order_id: int) -> None:
        try:
            self.app.send_task(
                CLIENT_EMAIL_TASK,
                kwargs={"order_id": order_id},
                queue=CLIENT_EMAIL_QUEUE,
                routing_key=CLIENT_EMAIL_QUEUE,
            )
        except Exception as exc:
            logger.error("client_email.enqueue_failed", order_id=order_id, error=str(exc))
            return
        logger.info("client_email.enqueued", order_id=order_id)

    def on_order_confirmed(self, event: OrderConfirmedEvent) -> None:
        self.notify_order_status(event.order_id)


@dataclass(frozen=True)
class EnqueuedJob:
    id: str
    job: NotificationJobDTO
    countdown: int


class InMemoryQueueClient(QueueClient):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._jobs: list[EnqueuedJob] = []
        self.fail_with: Exception | None = None

    def enqueue(self, job: NotificationJobDTO, countdown: int) -> str:
        if self.fail_with is not None:
            raise SchedulingError(str(self.fail_with), channel=job.channel) from self.fail_with
        entry = EnqueuedJob(id=str(uuid.uuid4()), job=job, countdown=countdown)
        with self._lock:
            self._jobs.append(entry)
        logger.debug("memory_queue.enqueued", job_id=entry.id, channel=job.channel, countdown=countdown)
        return entry.id

    @property
    def jobs(self) -> list[EnqueuedJob]:
        with self._lock:
            return list(self._jobs)

    def for_channel(self, channel: str) -> list[EnqueuedJob]:
        return [e for e in self.jobs if e.job.channel == channel]

    def clear(self) -> None:
        with self._lock:
            self._jobs.clear()
        self.fail_with = None
