"""
Domínio → ORM do order-bot.

⚑ Cliente (tenant) 1-* Comprador / Pedido, 1-1 BotSettings
⚑ Telefone do comprador é único por cliente, nunca global
⚑ Pedido: status só sai de `pending`; flags *_sent são monotônicas
⚑ Message: trilha de auditoria append-only, uma linha por tentativa
"""

from __future__ import annotations

from django.db import models
from django.db.models import Index, UniqueConstraint


class Language(models.TextChoices):
    EN = "en", "English"
    FR = "fr", "Français"
    AR = "ar", "العربية"


# ╭──────────────────────────────────────────────╮
# │ 1. Clientes (lojistas)                      │
# ╰──────────────────────────────────────────────╯
class Client(models.Model):
    name = models.CharField(max_length=255)
    email = models.EmailField(unique=True, max_length=254)
    phone = models.CharField(max_length=32, blank=True, null=True)
    company_name = models.CharField(max_length=255, blank=True, null=True)
    language = models.CharField(max_length=2, choices=Language.choices, default=Language.EN)
    password_hash = models.CharField(max_length=255, blank=True, default="")
    reset_token = models.CharField(max_length=128, unique=True, blank=True, null=True)
    reset_token_expires_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "clients"

    def __str__(self) -> str:
        return f"{self.company_name or self.name} <{self.email}>"


class BotSettings(models.Model):
    """
    Configuração do bot por cliente. Criada sob demanda com os defaults.
    """
    client = models.OneToOneField(Client, on_delete=models.CASCADE, related_name="bot_settings")
    whatsapp_template = models.TextField(blank=True, null=True)
    sms_template = models.TextField(blank=True, null=True)
    whatsapp_delay_minutes = models.PositiveIntegerField(default=60)
    sms_delay_minutes = models.PositiveIntegerField(default=240)
    sms_enabled = models.BooleanField(default=False)
    language = models.CharField(max_length=2, choices=Language.choices, blank=True, null=True)
    company_name = models.CharField(max_length=255, blank=True, null=True)
    support_phone = models.CharField(max_length=32, blank=True, null=True)
    store_url = models.URLField(max_length=500, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "bot_settings"
        verbose_name_plural = "bot settings"

    def __str__(self) -> str:
        return f"BotSettings(client={self.client_id})"


# ╭──────────────────────────────────────────────╮
# │ 2. Compradores                              │
# ╰──────────────────────────────────────────────╯
class Buyer(models.Model):
    client = models.ForeignKey(Client, on_delete=models.CASCADE, related_name="buyers")
    name = models.CharField(max_length=255)
    phone = models.CharField(max_length=20)
    email = models.EmailField(blank=True, null=True)
    address = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "buyers"
        constraints = [
            UniqueConstraint(fields=["client", "phone"], name="uq_buyer_client_phone"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.phone})"


# ╭──────────────────────────────────────────────╮
# │ 3. Pedidos                                  │
# ╰──────────────────────────────────────────────╯
class Order(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        DECLINED = "declined", "Declined"
        CHANGED = "changed", "Changed"

    class PaymentStatus(models.TextChoices):
        UNPAID = "unpaid", "Unpaid"
        PAID = "paid", "Paid"
        REFUNDED = "refunded", "Refunded"

    class DeliveryStatus(models.TextChoices):
        PENDING = "pending", "Pending"
        SHIPPED = "shipped", "Shipped"
        DELIVERED = "delivered", "Delivered"
        RETURNED = "returned", "Returned"

    order_number = models.CharField(max_length=64, unique=True)
    client = models.ForeignKey(Client, on_delete=models.CASCADE, related_name="orders")
    buyer = models.ForeignKey(Buyer, on_delete=models.PROTECT, related_name="orders")
    product_name = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField()
    total_price = models.DecimalField(max_digits=12, decimal_places=2)
    confirmation_token = models.CharField(max_length=64, unique=True, editable=False)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING, db_index=True)

    whatsapp_sent = models.BooleanField(default=False)
    whatsapp_sent_at = models.DateTimeField(blank=True, null=True)
    whatsapp_scheduled_at = models.DateTimeField(blank=True, null=True)
    sms_sent = models.BooleanField(default=False)
    sms_sent_at = models.DateTimeField(blank=True, null=True)
    sms_scheduled_at = models.DateTimeField(blank=True, null=True)
    confirmed_at = models.DateTimeField(blank=True, null=True)

    payment_status = models.CharField(max_length=10, choices=PaymentStatus.choices, default=PaymentStatus.UNPAID)
    payment_method = models.CharField(max_length=50, blank=True, null=True)
    delivery_status = models.CharField(max_length=10, choices=DeliveryStatus.choices, default=DeliveryStatus.PENDING)
    shipping_address = models.TextField(blank=True, null=True)
    wilaya = models.CharField(max_length=100, blank=True, null=True)
    commune = models.CharField(max_length=100, blank=True, null=True)

    notes = models.TextField(blank=True, null=True)
    internal_notes = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            Index(fields=["client", "status"]),
            Index(fields=["status", "whatsapp_sent", "created_at"], name="order_unsent_idx"),
        ]

    def __str__(self) -> str:
        return f"#{self.order_number} ({self.status})"


# ╭──────────────────────────────────────────────╮
# │ 4. Auditoria de envios                      │
# ╰──────────────────────────────────────────────╯
class Message(models.Model):
    class Type(models.TextChoices):
        WHATSAPP = "whatsapp", "WhatsApp"
        SMS = "sms", "SMS"

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        SENT = "sent", "Sent"
        DELIVERED = "delivered", "Delivered"
        FAILED = "failed", "Failed"

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="messages")
    client = models.ForeignKey(Client, on_delete=models.CASCADE, related_name="messages")
    buyer = models.ForeignKey(Buyer, on_delete=models.CASCADE, related_name="messages")
    message_type = models.CharField(max_length=10, choices=Type.choices)
    recipient_phone = models.CharField(max_length=20)
    message_content = models.TextField()
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING)
    attempt = models.PositiveSmallIntegerField(default=1)
    error_message = models.TextField(blank=True, null=True)
    sent_at = models.DateTimeField(blank=True, null=True)
    delivered_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "messages"
        ordering = ["created_at", "id"]
        indexes = [Index(fields=["order", "message_type"])]

    def __str__(self) -> str:
        return f"{self.message_type} → {self.recipient_phone} ({self.status})"
