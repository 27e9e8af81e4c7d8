"""
Camada de fila: retentativa com backoff, abandono e lock da varredura.
"""
from __future__ import annotations

from unittest import mock

from django.core.cache import cache
from django.test import TestCase
from prometheus_client import REGISTRY

from order_bot.adapters.message_broker.queue_clients import CeleryClientNotifier
from order_bot.adapters.notifiers.email.order_status_email import OrderStatusEmailNotifier
from order_bot.core.application.commands.notification_commands import DispatchNotificationCommand
from order_bot.core.application.dtos.notification_job_dto import NotificationJobDTO, RetryPolicy
from order_bot.core.domain.events.events import OrderConfirmedEvent
from order_bot.core.domain.events.exceptions import ChannelUnavailable, DeliveryFailure
from order_bot_api.tasks import (
    dispatch_sms_notification,
    dispatch_whatsapp_notification,
    notify_client_order_status,
    sweep_unsent_orders,
)
from plugins.django_interface.models import Message
from tests.helpers.factories import FakeSender, make_client, make_order, memory_queue, registered_handler


def abandoned_count(channel: str) -> float:
    return REGISTRY.get_sample_value("order_bot_dispatch_abandoned_total", {"channel": channel}) or 0.0


class RetryPolicyTests(TestCase):
    def test_exponential_backoff(self):
        policy = RetryPolicy(max_attempts=3, base_delay_seconds=60)

        self.assertEqual(policy.countdown_for(1), 60)
        self.assertEqual(policy.countdown_for(2), 120)
        self.assertEqual(policy.countdown_for(3), 240)

    def test_attempts_left(self):
        policy = RetryPolicy(max_attempts=3)

        self.assertTrue(policy.has_attempts_left(1))
        self.assertTrue(policy.has_attempts_left(2))
        self.assertFalse(policy.has_attempts_left(3))


class DispatchTaskTests(TestCase):
    def setUp(self):
        self.order = make_order(make_client())
        self.handler = registered_handler(DispatchNotificationCommand)

    def payload(self, channel: str = "whatsapp", max_attempts: int = 3) -> dict:
        return NotificationJobDTO(
            order_id=self.order.id,
            client_id=self.order.client_id,
            buyer_id=self.order.buyer_id,
            channel=channel,
            phone="213555000111",
            message="Please confirm",
            max_attempts=max_attempts,
            backoff_seconds=60,
        ).model_dump(mode="json")

    def run_task(self, task, sender: FakeSender, payload: dict):
        with mock.patch.object(self.handler, "sender_factory", lambda channel: sender):
            return task.apply(kwargs={"job": payload}).get()

    def test_retries_until_success(self):
        sender = FakeSender(outcomes=[ChannelUnavailable("offline"), ChannelUnavailable("offline"), "wamid"])

        result = self.run_task(dispatch_whatsapp_notification, sender, self.payload())

        self.assertEqual(result["status"], "sent")
        self.assertEqual(len(sender.calls), 3)
        statuses = list(Message.objects.filter(order=self.order).order_by("id").values_list("status", "attempt"))
        self.assertEqual(statuses, [("failed", 1), ("failed", 2), ("sent", 3)])
        self.order.refresh_from_db()
        self.assertTrue(self.order.whatsapp_sent)

    def test_abandons_after_max_attempts(self):
        before = abandoned_count("sms")
        sender = FakeSender(channel="sms", outcomes=[DeliveryFailure("rejected")] * 3)

        result = self.run_task(dispatch_sms_notification, sender, self.payload("sms"))

        self.assertEqual(result["status"], "abandoned")
        self.assertEqual(result["attempts"], 3)
        self.assertEqual(Message.objects.filter(order=self.order, status="failed").count(), 3)
        self.assertEqual(abandoned_count("sms"), before + 1)
        self.order.refresh_from_db()
        self.assertFalse(self.order.sms_sent)

    def test_single_attempt_policy_does_not_retry(self):
        sender = FakeSender(outcomes=[ChannelUnavailable("offline"), "never"])

        result = self.run_task(dispatch_whatsapp_notification, sender, self.payload(max_attempts=1))

        self.assertEqual(result["status"], "abandoned")
        self.assertEqual(len(sender.calls), 1)


class SweepTaskTests(TestCase):
    def setUp(self):
        self.queue = memory_queue()
        self.queue.clear()
        cache.clear()

    def tearDown(self):
        self.queue.clear()

    def test_sweep_redrives_unscheduled_order(self):
        order = make_order(make_client())

        result = sweep_unsent_orders.apply().get()

        self.assertEqual(result, {"status": "ok", "redriven": 1})
        self.assertEqual(self.queue.jobs[0].job.order_id, order.id)

    def test_overlapping_sweep_is_skipped(self):
        make_order(make_client())
        cache.add("locks:order_bot:monitor:sweep", "busy", 60)

        result = sweep_unsent_orders.apply().get()

        self.assertEqual(result["status"], "busy")
        self.assertEqual(self.queue.jobs, [])


class ClientEmailTaskTests(TestCase):
    def confirmed(self, order_id: int = 7) -> OrderConfirmedEvent:
        return OrderConfirmedEvent(order_id=order_id, client_id=1, status="approved", order={"id": order_id})

    def test_confirmation_only_publishes_a_job(self):
        app = mock.Mock()

        CeleryClientNotifier(app=app).on_order_confirmed(self.confirmed(7))

        app.send_task.assert_called_once_with(
            "order_bot_api.tasks.notify_client_order_status",
            kwargs={"order_id": 7},
            queue="email",
            routing_key="email",
        )

    def test_broker_failure_does_not_reach_the_buyer(self):
        app = mock.Mock()
        app.send_task.side_effect = ConnectionError("broker down")

        CeleryClientNotifier(app=app).on_order_confirmed(self.confirmed())

        app.send_task.assert_called_once()

    def test_worker_sends_the_email(self):
        with mock.patch.object(OrderStatusEmailNotifier, "notify_order_status") as notify:
            result = notify_client_order_status.apply(kwargs={"order_id": 9}).get()

        notify.assert_called_once_with(9)
        self.assertEqual(result, {"status": "done", "order_id": 9})
