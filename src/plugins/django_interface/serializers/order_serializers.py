# =========================================================
# Serializers compatíveis com as *entities* (e não com os
# modelos Django). O token de confirmação nunca é exposto.
# =========================================================
from rest_framework import serializers


# ───────────────────────────────────────────────
# Pedidos
# ───────────────────────────────────────────────
class OrderSerializer(serializers.Serializer):
    id                    = serializers.IntegerField()
    order_number          = serializers.CharField()
    client_id             = serializers.IntegerField()
    buyer_id              = serializers.IntegerField()
    product_name          = serializers.CharField()
    quantity              = serializers.IntegerField()
    total_price           = serializers.DecimalField(max_digits=12, decimal_places=2)
    status                = serializers.CharField()
    whatsapp_sent         = serializers.BooleanField()
    whatsapp_sent_at      = serializers.DateTimeField(allow_null=True)
    whatsapp_scheduled_at = serializers.DateTimeField(allow_null=True)
    sms_sent              = serializers.BooleanField()
    sms_sent_at           = serializers.DateTimeField(allow_null=True)
    sms_scheduled_at      = serializers.DateTimeField(allow_null=True)
    confirmed_at          = serializers.DateTimeField(allow_null=True)
    payment_status        = serializers.CharField()
    payment_method        = serializers.CharField(allow_null=True)
    delivery_status       = serializers.CharField()
    shipping_address      = serializers.CharField(allow_null=True)
    wilaya                = serializers.CharField(allow_null=True)
    commune               = serializers.CharField(allow_null=True)
    notes                 = serializers.CharField(allow_null=True)
    internal_notes        = serializers.CharField(allow_null=True)
    created_at            = serializers.DateTimeField()
    updated_at            = serializers.DateTimeField()


# ───────────────────────────────────────────────
# Auditoria de envios
# ───────────────────────────────────────────────
class MessageSerializer(serializers.Serializer):
    id              = serializers.IntegerField()
    order_id        = serializers.IntegerField()
    message_type    = serializers.CharField()
    recipient_phone = serializers.CharField()
    message_content = serializers.CharField()
    status          = serializers.CharField()
    attempt         = serializers.IntegerField()
    error_message   = serializers.CharField(allow_null=True)
    sent_at         = serializers.DateTimeField(allow_null=True)
    delivered_at    = serializers.DateTimeField(allow_null=True)
    created_at      = serializers.DateTimeField()


# ───────────────────────────────────────────────
# Configuração do bot
# ───────────────────────────────────────────────
class BotSettingsSerializer(serializers.Serializer):
    client_id              = serializers.IntegerField()
    whatsapp_template      = serializers.CharField(allow_null=True)
    sms_template           = serializers.CharField(allow_null=True)
    whatsapp_delay_minutes = serializers.IntegerField()
    sms_delay_minutes      = serializers.IntegerField()
    sms_enabled            = serializers.BooleanField()
    language               = serializers.CharField(allow_null=True)
    company_name           = serializers.CharField(allow_null=True)
    support_phone          = serializers.CharField(allow_null=True)
    store_url              = serializers.CharField(allow_null=True)
    updated_at             = serializers.DateTimeField(allow_null=True)
