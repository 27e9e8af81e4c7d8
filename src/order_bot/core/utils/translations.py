"""
Textos padrão por idioma (en / fr / ar).

Usados quando o cliente não definiu template próprio no BotSettings.
Os placeholders seguem a sintaxe `{{ variavel }}` do template_utils.
"""
from __future__ import annotations

from django.conf import settings

SUPPORTED_LOCALES = ("en", "fr", "ar")

TRANSLATIONS: dict[str, dict[str, str]] = {
    "en": {
        "whatsapp_order_confirmation": (
            "Hello {{buyer_name}}! 👋\n\n"
            "We received your order from {{company_name}}:\n\n"
            "📦 Order #{{order_number}}\n"
            "🛍️ Product: {{product_name}}\n"
            "📊 Quantity: {{quantity}}\n"
            "💰 Total: {{total_price}} DZD\n\n"
            "Please confirm your order by clicking the link below:\n"
            "{{confirmation_link}}\n\n"
            "For support, contact us at {{support_phone}}\n"
            "Visit our store: {{store_url}}"
        ),
        "sms_order_confirmation": (
            "{{company_name}}: order #{{order_number}} ({{product_name}} x{{quantity}}, "
            "{{total_price}} DZD). Confirm here: {{confirmation_link}}"
        ),
        "status_approved": "Your order has been APPROVED ✅",
        "status_declined": "Your order has been DECLINED ❌",
        "status_changed": "Changes requested for your order 🔄",
        "email_order_update": "Order Status Update",
    },
    "fr": {
        "whatsapp_order_confirmation": (
            "Bonjour {{buyer_name}}! 👋\n\n"
            "Nous avons reçu votre commande de {{company_name}}:\n\n"
            "📦 Commande #{{order_number}}\n"
            "🛍️ Produit: {{product_name}}\n"
            "📊 Quantité: {{quantity}}\n"
            "💰 Total: {{total_price}} DZD\n\n"
            "Veuillez confirmer votre commande en cliquant sur le lien ci-dessous:\n"
            "{{confirmation_link}}\n\n"
            "Pour assistance, contactez-nous au {{support_phone}}\n"
            "Visitez notre boutique: {{store_url}}"
        ),
        "sms_order_confirmation": (
            "{{company_name}}: commande #{{order_number}} ({{product_name}} x{{quantity}}, "
            "{{total_price}} DZD). Confirmez ici: {{confirmation_link}}"
        ),
        "status_approved": "Votre commande a été APPROUVÉE ✅",
        "status_declined": "Votre commande a été REFUSÉE ❌",
        "status_changed": "Modifications demandées pour votre commande 🔄",
        "email_order_update": "Mise à jour du statut de la commande",
    },
    "ar": {
        "whatsapp_order_confirmation": (
            "مرحبا {{buyer_name}}! 👋\n\n"
            "لقد تلقينا طلبك من {{company_name}}:\n\n"
            "📦 الطلب #{{order_number}}\n"
            "🛍️ المنتج: {{product_name}}\n"
            "📊 الكمية: {{quantity}}\n"
            "💰 المجموع: {{total_price}} دج\n\n"
            "يرجى تأكيد طلبك من خلال النقر على الرابط أدناه:\n"
            "{{confirmation_link}}\n\n"
            "للدعم، اتصل بنا على {{support_phone}}\n"
            "قم بزيارة متجرنا: {{store_url}}"
        ),
        "sms_order_confirmation": (
            "{{company_name}}: الطلب #{{order_number}} ({{product_name}} x{{quantity}}، "
            "{{total_price}} دج). أكد هنا: {{confirmation_link}}"
        ),
        "status_approved": "تم الموافقة على طلبك ✅",
        "status_declined": "تم رفض طلبك ❌",
        "status_changed": "تم طلب تغييرات على طلبك 🔄",
        "email_order_update": "تحديث حالة الطلب",
    },
}


def resolve_locale(*candidates: str | None) -> str:
    """Primeiro idioma suportado entre os candidatos; senão DEFAULT_LOCALE."""
    for lang in candidates:
        if lang and lang.lower() in SUPPORTED_LOCALES:
            return lang.lower()
    default = getattr(settings, "DEFAULT_LOCALE", "en")
    return default if default in SUPPORTED_LOCALES else "en"


def get_translation(lang: str | None, key: str) -> str:
    """Idioma pedido → inglês → a própria chave."""
    return TRANSLATIONS.get(lang or "en", {}).get(key) or TRANSLATIONS["en"].get(key) or key


def default_template(channel: str, lang: str | None) -> str:
    return get_translation(lang, f"{channel}_order_confirmation")
