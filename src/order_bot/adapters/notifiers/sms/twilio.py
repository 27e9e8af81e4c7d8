from __future__ import annotations

import structlog

from order_bot.adapters.notifiers.base import BaseNotifier
from order_bot.core.application.ports.channel_sender import ChannelSender

logger = structlog.get_logger()


class TwilioSMSSender(BaseNotifier, ChannelSender):
    """
    SMS via Twilio Programmable Messaging (REST, basic auth SID:token).
    """

    channel = "sms"
    API_BASE = "https://api.twilio.com/2010-04-01"

    def __init__(self, account_sid: str, auth_token: str, from_number: str, timeout: float | None = None) -> None:
        super().__init__("twilio", "sms", timeout=timeout)
        self._account_sid = account_sid
        self._auth_token  = auth_token
        self._from_number = from_number

    def is_ready(self) -> bool:
        return bool(self._account_sid and self._auth_token and self._from_number)

    def send(self, phone: str, message: str) -> str | None:
        to = phone if phone.startswith("+") else f"+{phone}"
        resp = self._request(
            "POST",
            f"{self.API_BASE}/Accounts/{self._account_sid}/Messages.json",
            data={"To": to, "From": self._from_number, "Body": message},
            auth=(self._account_sid, self._auth_token),
        )
        sid = resp.json().get("sid")
        logger.info("sms.sent", provider=self.provider, to=to, sid=sid)
        return sid
