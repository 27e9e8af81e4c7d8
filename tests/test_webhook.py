"""
Ingestão de pedidos pelo webhook e agendamento das notificações.
"""
from __future__ import annotations

from decimal import Decimal
from unittest import mock

from django.db import DatabaseError
from django.test import TestCase
from rest_framework.test import APIClient

from plugins.django_interface.models import Buyer, Order
from tests.helpers.factories import make_bot_settings, make_client, memory_queue, webhook_payload

WEBHOOK_URL = "/api/webhook/order"


class OrderWebhookTests(TestCase):
    def setUp(self):
        self.api = APIClient()
        self.queue = memory_queue()
        self.queue.clear()
        self.client_obj = make_client(id=42)

    def tearDown(self):
        self.queue.clear()

    # ----------------------------------------------------------------─  caminho feliz

    def test_creates_pending_order_and_schedules_whatsapp_only(self):
        make_bot_settings(self.client_obj, whatsapp_delay_minutes=30, sms_enabled=False)
        payload = webhook_payload(42, order_number="ORD-1")

        resp = self.api.post(WEBHOOK_URL, payload, format="json")

        self.assertEqual(resp.status_code, 201, resp.content)
        body = resp.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["order"]["order_number"], "ORD-1")
        self.assertEqual(body["order"]["status"], "pending")
        self.assertEqual(body["order"]["buyer_name"], "Ali")

        order = Order.objects.get(order_number="ORD-1")
        self.assertEqual(order.status, "pending")
        self.assertEqual(order.quantity, 2)
        self.assertEqual(order.total_price, Decimal("500"))
        self.assertTrue(order.confirmation_token)
        self.assertIsNotNone(order.whatsapp_scheduled_at)
        self.assertIsNone(order.sms_scheduled_at)

        jobs = self.queue.jobs
        self.assertEqual(len(jobs), 1)
        self.assertEqual(jobs[0].job.channel, "whatsapp")
        self.assertEqual(jobs[0].countdown, 30 * 60)
        self.assertEqual(jobs[0].job.order_id, order.id)
        self.assertEqual(jobs[0].job.phone, "213555000111")
        self.assertIn(f"orderId={order.id}", jobs[0].job.message)
        self.assertIn(order.confirmation_token, jobs[0].job.message)
        self.assertEqual(self.queue.for_channel("sms"), [])

    def test_sms_job_scheduled_when_enabled(self):
        make_bot_settings(self.client_obj, whatsapp_delay_minutes=60, sms_delay_minutes=240, sms_enabled=True)

        resp = self.api.post(WEBHOOK_URL, webhook_payload(42), format="json")

        self.assertEqual(resp.status_code, 201, resp.content)
        sms_jobs = self.queue.for_channel("sms")
        self.assertEqual(len(sms_jobs), 1)
        self.assertEqual(sms_jobs[0].countdown, 240 * 60)
        self.assertEqual(len(self.queue.for_channel("whatsapp")), 1)

    def test_default_settings_created_lazily(self):
        resp = self.api.post(WEBHOOK_URL, webhook_payload(42), format="json")

        self.assertEqual(resp.status_code, 201, resp.content)
        self.assertEqual(self.queue.jobs[0].countdown, 60 * 60)
        self.assertTrue(hasattr(self.client_obj, "bot_settings"))

    def test_custom_template_is_rendered(self):
        make_bot_settings(
            self.client_obj,
            whatsapp_template="Hi {{buyer_name}}, {{product_name}} x{{quantity}} = {{total_price}}",
        )
        self.api.post(WEBHOOK_URL, webhook_payload(42, total_price=499.9), format="json")

        self.assertEqual(self.queue.jobs[0].job.message, "Hi Ali, Widget x2 = 499.90")

    def test_stored_template_that_cannot_render_falls_back_to_default(self):
        # gravado direto no banco, sem passar pela validação da API
        make_bot_settings(
            self.client_obj,
            language="en",
            whatsapp_template='Hi {{buyer_name}} {% include "nope.html" %}',
        )

        resp = self.api.post(WEBHOOK_URL, webhook_payload(42, order_number="ORD-TPL"), format="json")

        self.assertEqual(resp.status_code, 201, resp.content)
        jobs = self.queue.for_channel("whatsapp")
        self.assertEqual(len(jobs), 1)
        self.assertTrue(jobs[0].job.message.startswith("Hello Ali!"))
        self.assertIn("/confirm?orderId=", jobs[0].job.message)
        self.assertIsNotNone(Order.objects.get(order_number="ORD-TPL").whatsapp_scheduled_at)

    def test_buyer_reused_for_same_client_and_phone(self):
        self.api.post(WEBHOOK_URL, webhook_payload(42), format="json")
        self.api.post(WEBHOOK_URL, webhook_payload(42, buyer={"name": "Ali", "phone": "+213 555 000 111"}), format="json")

        self.assertEqual(Buyer.objects.filter(client=self.client_obj).count(), 1)
        self.assertEqual(Order.objects.filter(client=self.client_obj).count(), 2)

    def test_buyer_scoped_per_client(self):
        other = make_client()
        self.api.post(WEBHOOK_URL, webhook_payload(42), format="json")
        self.api.post(WEBHOOK_URL, webhook_payload(other.id), format="json")

        self.assertEqual(Buyer.objects.filter(phone="213555000111").count(), 2)

    # ----------------------------------------------------------------─  erros

    def test_unknown_client_returns_404(self):
        resp = self.api.post(WEBHOOK_URL, webhook_payload(9999), format="json")

        self.assertEqual(resp.status_code, 404)
        self.assertIn("error", resp.json())
        self.assertFalse(Order.objects.exists())

    def test_missing_fields_return_400_with_field_list(self):
        payload = webhook_payload(42)
        del payload["product_name"]
        payload["quantity"] = 0

        resp = self.api.post(WEBHOOK_URL, payload, format="json")

        self.assertEqual(resp.status_code, 400)
        self.assertIn("product_name", resp.json()["fields"])
        self.assertIn("quantity", resp.json()["fields"])
        self.assertFalse(Order.objects.exists())

    def test_invalid_phone_returns_400(self):
        payload = webhook_payload(42, buyer={"name": "Ali", "phone": "12"})

        resp = self.api.post(WEBHOOK_URL, payload, format="json")

        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["fields"], ["buyer.phone"])
        self.assertFalse(Buyer.objects.exists())

    def test_duplicate_order_number_returns_400(self):
        self.api.post(WEBHOOK_URL, webhook_payload(42, order_number="ORD-DUP"), format="json")

        resp = self.api.post(WEBHOOK_URL, webhook_payload(42, order_number="ORD-DUP"), format="json")

        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["fields"], ["order_number"])
        self.assertEqual(Order.objects.filter(order_number="ORD-DUP").count(), 1)

    def test_enqueue_failure_returns_500_and_keeps_order_for_monitor(self):
        self.queue.fail_with = ConnectionError("broker down")

        resp = self.api.post(WEBHOOK_URL, webhook_payload(42, order_number="ORD-Q"), format="json")

        self.assertEqual(resp.status_code, 500)
        order = Order.objects.get(order_number="ORD-Q")
        self.assertEqual(order.status, "pending")
        self.assertIsNone(order.whatsapp_scheduled_at)

    def test_database_failure_returns_500_and_leaves_nothing_behind(self):
        with mock.patch.object(Order.objects, "create", side_effect=DatabaseError("disk full")):
            resp = self.api.post(WEBHOOK_URL, webhook_payload(42, order_number="ORD-DB"), format="json")

        self.assertEqual(resp.status_code, 500)
        self.assertFalse(Buyer.objects.filter(client=self.client_obj).exists())
        self.assertFalse(Order.objects.filter(order_number="ORD-DB").exists())
        self.assertEqual(self.queue.jobs, [])
