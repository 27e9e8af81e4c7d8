"""
Admin site registry
-------------------
Registra os modelos do order-bot de forma dinâmica.
"""

import structlog
from django.contrib import admin as django_admin

from . import models

logger = structlog.get_logger(__name__)

# ╭──────────────────────────────────────────────╮
# │ Configuração de cada ModelAdmin             │
# ╰──────────────────────────────────────────────╯
MODEL_ADMIN_REGISTRY: dict[type[models.models.Model], dict] = {
    models.Client: dict(
        list_display=("name", "email", "company_name", "language", "created_at"),
        search_fields=("name", "email", "company_name"),
        list_filter=("language",),
        exclude=("password_hash", "reset_token"),
    ),
    models.BotSettings: dict(
        list_display=("client", "whatsapp_delay_minutes", "sms_delay_minutes", "sms_enabled", "language"),
        list_filter=("sms_enabled", "language"),
    ),
    models.Buyer: dict(
        list_display=("name", "phone", "client", "created_at"),
        search_fields=("name", "phone"),
        list_filter=("client",),
    ),
    models.Order: dict(
        list_display=(
            "order_number",
            "client",
            "buyer",
            "status",
            "whatsapp_sent",
            "sms_sent",
            "created_at",
        ),
        list_filter=("status", "payment_status", "delivery_status", "client"),
        search_fields=("order_number", "product_name", "buyer__name"),
        readonly_fields=("confirmation_token",),
    ),
    models.Message: dict(
        list_display=("order", "message_type", "attempt", "status", "sent_at"),
        list_filter=("message_type", "status"),
        search_fields=("recipient_phone",),
    ),
}

# ╭──────────────────────────────────────────────╮
# │ Registro dinâmico                           │
# ╰──────────────────────────────────────────────╯
for model, opts in MODEL_ADMIN_REGISTRY.items():
    admin_class = type(f"{model.__name__}Admin", (django_admin.ModelAdmin,), opts)
    django_admin.site.register(model, admin_class)
    logger.debug("admin.model_registered", model=model.__name__)
