"""
Varredura de segurança: pedidos pendentes que nunca receberam o envio.
"""
from __future__ import annotations

from datetime import timedelta
from io import StringIO

from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone

from order_bot.core.application.commands.notification_commands import SweepUnsentOrdersCommand
from plugins.django_interface.models import Message, Order
from tests.helpers.factories import make_bot_settings, make_client, make_order, memory_queue, registered_handler


class SweepUnsentOrdersTests(TestCase):
    def setUp(self):
        self.queue = memory_queue()
        self.queue.clear()
        self.handler = registered_handler(SweepUnsentOrdersCommand)
        self.client_obj = make_client()

    def tearDown(self):
        self.queue.clear()

    def sweep(self):
        return self.handler.handle(SweepUnsentOrdersCommand(batch_size=100))

    def test_redrives_never_scheduled_order(self):
        order = make_order(self.client_obj)

        events = self.sweep()

        self.assertEqual(len(events), 1)
        self.assertTrue(events[0].redrive)
        self.assertEqual(events[0].channel, "whatsapp")
        order.refresh_from_db()
        self.assertIsNotNone(order.whatsapp_scheduled_at)

    def test_delay_is_anchored_on_creation_time(self):
        make_bot_settings(self.client_obj, whatsapp_delay_minutes=60)
        order = make_order(self.client_obj)
        Order.objects.filter(id=order.id).update(created_at=timezone.now() - timedelta(minutes=90))

        self.sweep()

        self.assertEqual(self.queue.jobs[0].countdown, 0)

    def test_ignores_freshly_scheduled_order(self):
        make_order(self.client_obj, whatsapp_scheduled_at=timezone.now() + timedelta(minutes=30))

        self.assertEqual(self.sweep(), [])
        self.assertEqual(self.queue.jobs, [])

    def test_redrives_stale_schedule(self):
        make_order(self.client_obj, whatsapp_scheduled_at=timezone.now() - timedelta(minutes=20))

        self.assertEqual(len(self.sweep()), 1)

    def test_ignores_sent_and_confirmed_orders(self):
        make_order(self.client_obj, whatsapp_sent=True)
        make_order(self.client_obj, status="approved")

        self.assertEqual(self.sweep(), [])

    def test_sms_only_when_enabled(self):
        make_bot_settings(self.client_obj, sms_enabled=True)
        make_order(self.client_obj, whatsapp_sent=True)

        events = self.sweep()

        self.assertEqual([e.channel for e in events], ["sms"])

    def test_channel_at_attempt_cap_is_left_alone(self):
        order = make_order(self.client_obj)
        for attempt in range(self.handler.attempt_cap):
            Message.objects.create(
                order=order,
                client=self.client_obj,
                buyer=order.buyer,
                message_type="whatsapp",
                recipient_phone=order.buyer.phone,
                message_content="x",
                status="failed",
                attempt=attempt + 1,
            )

        self.assertEqual(self.sweep(), [])

    def test_old_orders_are_out_of_scope(self):
        order = make_order(self.client_obj)
        Order.objects.filter(id=order.id).update(created_at=timezone.now() - timedelta(days=5))

        self.assertEqual(self.sweep(), [])

    def test_one_failing_order_does_not_abort_sweep(self):
        make_order(self.client_obj)
        make_order(self.client_obj)
        calls = {"n": 0}
        original = self.queue.enqueue

        def flaky(job, countdown):
            calls["n"] += 1
            if calls["n"] == 1:
                raise ConnectionError("broker hiccup")
            return original(job, countdown)

        self.queue.enqueue = flaky
        try:
            events = self.sweep()
        finally:
            del self.queue.enqueue

        self.assertEqual(len(events), 1)

    def test_sweep_is_idempotent(self):
        make_order(self.client_obj)

        self.assertEqual(len(self.sweep()), 1)
        self.assertEqual(self.sweep(), [])
        self.assertEqual(len(self.queue.jobs), 1)

    def test_management_command_runs_once(self):
        make_order(self.client_obj)
        out = StringIO()

        call_command("run_order_monitor", stdout=out)

        self.assertIn("1", out.getvalue())
        self.assertEqual(len(self.queue.jobs), 1)

    def test_stored_template_that_cannot_render_still_redrives(self):
        make_bot_settings(
            self.client_obj,
            language="en",
            whatsapp_template='{{buyer_name}} {% include "nope.html" %}',
        )
        order = make_order(self.client_obj)

        events = self.sweep()

        self.assertEqual(len(events), 1)
        jobs = self.queue.for_channel("whatsapp")
        self.assertEqual(len(jobs), 1)
        self.assertTrue(jobs[0].job.message.startswith("Hello Ali!"))
        order.refresh_from_db()
        self.assertIsNotNone(order.whatsapp_scheduled_at)
