"""
Fábrica de senders: devolve o provedor correto baseado no canal.
"""
from functools import lru_cache
from typing import Literal

from django.conf import settings

from order_bot.adapters.notifiers.email.brevo import BrevoEmail
from order_bot.adapters.notifiers.sms.twilio import TwilioSMSSender
from order_bot.adapters.notifiers.whatsapp.gateway import WhatsappGatewaySender
from order_bot.core.application.ports.channel_sender import ChannelSender


@lru_cache
def get_whatsapp_sender() -> WhatsappGatewaySender:
    return WhatsappGatewaySender(
        base_url=settings.WHATSAPP_GATEWAY_URL,
        api_key=settings.WHATSAPP_GATEWAY_API_KEY,
        session=settings.WHATSAPP_SESSION,
        timeout=settings.NOTIFICATION_SEND_TIMEOUT,
    )


@lru_cache
def get_sms_sender() -> TwilioSMSSender:
    return TwilioSMSSender(
        account_sid=settings.TWILIO_ACCOUNT_SID,
        auth_token=settings.TWILIO_AUTH_TOKEN,
        from_number=settings.TWILIO_SMS_FROM,
        timeout=settings.NOTIFICATION_SEND_TIMEOUT,
    )


@lru_cache
def get_email_notifier() -> BrevoEmail:
    return BrevoEmail(
        api_key=settings.BREVO_API_KEY,
        from_email=settings.DEFAULT_FROM_EMAIL,
        timeout=settings.NOTIFICATION_SEND_TIMEOUT,
    )


def get_sender(channel: Literal["whatsapp", "sms"]) -> ChannelSender:
    """
    Retorna o sender do canal.

    - 'whatsapp' → WhatsappGatewaySender
    - 'sms'      → TwilioSMSSender
    """
    if channel == "whatsapp":
        return get_whatsapp_sender()
    if channel == "sms":
        return get_sms_sender()
    raise ValueError(f"Canal de notificação desconhecido: {channel}")
