from django.conf import settings
from django.db.models.signals import pre_save
from django.dispatch import receiver

from order_bot.core.utils.phone_utils import normalize_phone

from .models import Buyer


@receiver(pre_save, sender=Buyer)
def normalize_buyer_phone_before_save(sender, instance: Buyer, **kwargs):
    norm = normalize_phone(instance.phone, default_region=settings.DEFAULT_PHONE_REGION)
    if not norm:
        raise ValueError(f"Telefone inválido: {instance.phone!r}")
    instance.phone = norm
