from __future__ import annotations

from decimal import Decimal

from django.test import SimpleTestCase

from order_bot.core.application.services.order_presenter import format_price
from order_bot.core.domain.events.exceptions import TemplateError
from order_bot.core.utils.template_utils import (
    TEMPLATE_VARIABLES,
    TemplateContext,
    render_message,
    validate_template,
)
from order_bot.core.utils.translations import SUPPORTED_LOCALES, default_template, get_translation, resolve_locale


class RenderMessageTests(SimpleTestCase):
    def test_substitutes_known_variables(self):
        ctx = TemplateContext.build(buyer_name="Ali", order_number="ORD-1", quantity=2)

        self.assertEqual(
            render_message("Hi {{buyer_name}}, #{{ order_number }} x{{quantity}}", ctx),
            "Hi Ali, #ORD-1 x2",
        )

    def test_unknown_variable_renders_empty(self):
        self.assertEqual(render_message("[{{nope}}]", TemplateContext()), "[]")

    def test_no_html_escaping(self):
        ctx = TemplateContext.build(product_name="Tea & <Biscuits>")

        self.assertEqual(render_message("{{product_name}}", ctx), "Tea & <Biscuits>")

    def test_none_becomes_empty_string(self):
        ctx = TemplateContext.build(store_url=None, support_phone="0555")

        self.assertEqual(render_message("{{store_url}}|{{support_phone}}", ctx), "|0555")

    def test_invalid_template_raises(self):
        with self.assertRaises(TemplateError):
            validate_template("{% for %}")
        with self.assertRaises(TemplateError):
            render_message("{% endif %}", TemplateContext())

    def test_only_variable_substitution_is_allowed(self):
        for text in (
            'Hi {{buyer_name}} {% include "nope.html" %}',
            "{% if buyer_name %}x{% endif %}",
            "{{ buyer_name|upper }}",
            "{% load static %}",
        ):
            with self.subTest(text=text), self.assertRaises(TemplateError):
                validate_template(text)

    def test_plain_substitution_template_is_valid(self):
        validate_template("Hi {{ buyer_name }}, order #{{order_number}} {# nota interna #}")


class RenderRoundTripTests(SimpleTestCase):
    """Com todas as variáveis preenchidas não sobra nenhum placeholder."""

    def setUp(self):
        self.ctx = TemplateContext.build(
            buyer_name="Ali",
            order_number="ORD-9",
            product_name="Widget",
            quantity=2,
            total_price="500",
            confirmation_link="https://shop.example.com/confirm?orderId=1&token=t",
            company_name="Atlas Store",
            support_phone="0555000111",
            store_url="https://atlas.example.com",
        )

    def test_every_known_variable_is_substituted(self):
        template = " | ".join("{{" + name + "}}" for name in TEMPLATE_VARIABLES)

        out = render_message(template, self.ctx)

        self.assertNotIn("{{", out)
        self.assertNotIn("}}", out)
        for value in self.ctx.as_dict().values():
            self.assertIn(value, out)

    def test_default_bodies_leave_no_placeholders(self):
        for lang in SUPPORTED_LOCALES:
            for channel in ("whatsapp", "sms"):
                with self.subTest(lang=lang, channel=channel):
                    out = render_message(default_template(channel, lang), self.ctx)

                    self.assertNotIn("{{", out)
                    self.assertNotIn("}}", out)
                    self.assertIn("https://shop.example.com/confirm?orderId=1&token=t", out)


class TranslationTests(SimpleTestCase):
    def test_resolve_locale_order(self):
        self.assertEqual(resolve_locale(None, "ar"), "ar")
        self.assertEqual(resolve_locale("fr", "ar"), "fr")
        self.assertEqual(resolve_locale("de", None), "en")

    def test_default_templates_exist_for_every_locale(self):
        for lang in ("en", "fr", "ar"):
            for channel in ("whatsapp", "sms"):
                self.assertIn("{{confirmation_link}}", default_template(channel, lang))

    def test_default_templates_do_not_promise_expiry(self):
        for lang in ("en", "fr", "ar"):
            self.assertNotIn("48", default_template("whatsapp", lang))

    def test_missing_key_falls_back_to_english_then_key(self):
        self.assertEqual(get_translation("xx", "status_approved"), get_translation("en", "status_approved"))
        self.assertEqual(get_translation("en", "no_such_key"), "no_such_key")


class FormatPriceTests(SimpleTestCase):
    def test_integral_values_have_no_decimals(self):
        self.assertEqual(format_price(500), "500")
        self.assertEqual(format_price(Decimal("4500.00")), "4500")

    def test_fractional_values_have_two_decimals(self):
        self.assertEqual(format_price(Decimal("499.9")), "499.90")
        self.assertEqual(format_price("12.3"), "12.30")
