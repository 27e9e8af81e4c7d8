from django.test import SimpleTestCase

from order_bot.core.utils.phone_utils import normalize_phone


class NormalizePhoneTests(SimpleTestCase):
    def test_international_forms_collapse_to_digits(self):
        for raw in ("213555000111", "+213555000111", "+213 555 00 01 11", "00213555000111"):
            self.assertEqual(normalize_phone(raw), "213555000111", raw)

    def test_local_number_uses_default_region(self):
        self.assertEqual(normalize_phone("0555 00 01 11"), "213555000111")

    def test_with_plus(self):
        self.assertEqual(normalize_phone("213555000111", with_plus=True), "+213555000111")

    def test_unusable_numbers(self):
        for raw in ("", "abc", "12", None):
            self.assertIsNone(normalize_phone(raw), raw)
