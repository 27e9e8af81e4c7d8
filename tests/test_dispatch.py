"""
Worker de envio: uma tentativa por chamada, trilha em Message e flag
`*_sent` gravada apenas no sucesso.
"""
from __future__ import annotations

from unittest import mock

from django.test import TestCase

from order_bot.adapters.repositories.message_repo_impl import MessageRepoImpl
from order_bot.adapters.repositories.order_repo_impl import OrderRepoImpl
from order_bot.core.application.commands.notification_commands import DispatchNotificationCommand
from order_bot.core.application.dtos.notification_job_dto import NotificationJobDTO
from order_bot.core.application.handlers.notification_handlers import DispatchNotificationHandler
from order_bot.core.domain.events.events import NotificationFailedEvent, NotificationSentEvent
from order_bot.core.domain.events.exceptions import ChannelUnavailable, DeliveryFailure
from order_bot.core.domain.services.event_dispatcher import EventDispatcher
from plugins.django_interface.models import Message, Order
from tests.helpers.factories import FakeSender, make_client, make_order


def job_for(order: Order, channel: str = "whatsapp") -> NotificationJobDTO:
    return NotificationJobDTO(
        order_id=order.id,
        client_id=order.client_id,
        buyer_id=order.buyer_id,
        channel=channel,
        phone=order.buyer.phone,
        message="Please confirm",
    )


class DispatchNotificationTests(TestCase):
    def setUp(self):
        self.order = make_order(make_client())
        self.dispatcher = EventDispatcher()
        self.sent_events: list = []
        self.failed_events: list = []
        self.dispatcher.subscribe(NotificationSentEvent, self.sent_events.append)
        self.dispatcher.subscribe(NotificationFailedEvent, self.failed_events.append)

    def handler_with(self, sender: FakeSender) -> DispatchNotificationHandler:
        return DispatchNotificationHandler(
            order_repo=OrderRepoImpl(),
            message_repo=MessageRepoImpl(),
            sender_factory=lambda channel: sender,
            dispatcher=self.dispatcher,
        )

    def test_two_failures_then_success(self):
        sender = FakeSender(outcomes=[ChannelUnavailable("offline"), ChannelUnavailable("offline"), "wamid-1"])
        handler = self.handler_with(sender)
        job = job_for(self.order)

        for attempt in (1, 2):
            with self.assertRaises(ChannelUnavailable):
                handler.handle(DispatchNotificationCommand(job=job, attempt=attempt))
            self.order.refresh_from_db()
            self.assertFalse(self.order.whatsapp_sent)

        result = handler.handle(DispatchNotificationCommand(job=job, attempt=3))

        self.assertEqual(result["status"], "sent")
        self.assertTrue(result["flag_flipped"])
        rows = list(Message.objects.filter(order=self.order).order_by("id"))
        self.assertEqual([m.status for m in rows], ["failed", "failed", "sent"])
        self.assertEqual([m.attempt for m in rows], [1, 2, 3])
        self.assertEqual(rows[0].error_message, "offline")
        self.assertIsNotNone(rows[2].sent_at)

        self.order.refresh_from_db()
        self.assertTrue(self.order.whatsapp_sent)
        self.assertIsNotNone(self.order.whatsapp_sent_at)
        self.assertEqual(len(self.sent_events), 1)
        self.assertEqual(len(self.failed_events), 2)

    def test_unexpected_exception_becomes_delivery_failure(self):
        handler = self.handler_with(FakeSender(outcomes=[RuntimeError("boom")]))

        with self.assertRaises(DeliveryFailure):
            handler.handle(DispatchNotificationCommand(job=job_for(self.order)))

        msg = Message.objects.get(order=self.order)
        self.assertEqual(msg.status, "failed")
        self.assertIn("boom", msg.error_message)

    def test_channel_not_ready_is_unavailable(self):
        sender = FakeSender(ready=False)
        handler = self.handler_with(sender)

        with self.assertRaises(ChannelUnavailable):
            handler.handle(DispatchNotificationCommand(job=job_for(self.order)))

        self.assertEqual(sender.calls, [])
        self.assertEqual(Message.objects.get(order=self.order).status, "failed")

    def test_skips_already_sent_channel(self):
        Order.objects.filter(id=self.order.id).update(whatsapp_sent=True)
        sender = FakeSender()

        result = self.handler_with(sender).handle(DispatchNotificationCommand(job=job_for(self.order)))

        self.assertEqual(result, {"status": "skipped", "reason": "already_sent"})
        self.assertEqual(sender.calls, [])
        self.assertFalse(Message.objects.exists())

    def test_skips_confirmed_order(self):
        Order.objects.filter(id=self.order.id).update(status="approved")
        sender = FakeSender()

        result = self.handler_with(sender).handle(DispatchNotificationCommand(job=job_for(self.order)))

        self.assertEqual(result["reason"], "order_confirmed")
        self.assertEqual(sender.calls, [])

    def test_skips_missing_order(self):
        job = job_for(self.order)
        Message.objects.all().delete()
        Order.objects.filter(id=self.order.id).delete()

        result = self.handler_with(FakeSender()).handle(DispatchNotificationCommand(job=job))

        self.assertEqual(result["reason"], "order_missing")

    def test_sent_flag_never_flips_twice(self):
        repo = OrderRepoImpl()
        first = repo.mark_sent(self.order.id, "whatsapp", self.order.created_at)
        second = repo.mark_sent(self.order.id, "whatsapp", self.order.created_at)

        self.assertTrue(first)
        self.assertFalse(second)

    def test_sms_is_independent_from_whatsapp(self):
        sender = FakeSender(channel="sms", outcomes=["SM123"])

        self.handler_with(sender).handle(DispatchNotificationCommand(job=job_for(self.order, "sms")))

        self.order.refresh_from_db()
        self.assertTrue(self.order.sms_sent)
        self.assertFalse(self.order.whatsapp_sent)

    def test_registered_handler_uses_sender_registry(self):
        from order_bot.adapters.config.composition_root import container

        handler = container.command_bus()._handlers[DispatchNotificationCommand]
        sender = FakeSender(outcomes=["id-1"])
        with mock.patch.object(handler, "sender_factory", lambda channel: sender):
            result = container.command_bus().dispatch(DispatchNotificationCommand(job=job_for(self.order)))

        self.assertEqual(result["status"], "sent")
        self.assertEqual(len(sender.calls), 1)
