from __future__ import annotations

from typing import Final

import structlog

from order_bot.adapters.notifiers.base import BaseNotifier
from order_bot.core.application.ports.channel_sender import ChannelSender
from order_bot.core.domain.events.exceptions import ChannelUnavailable

log = structlog.get_logger()


class WhatsappGatewaySender(BaseNotifier, ChannelSender):
    """
    Adapter para o gateway HTTP que mantém a sessão WhatsApp Web.

    O core só enxerga `send` / `is_ready`; a sessão (socket, QR code,
    reconexão) pertence ao gateway.

        GET  {base}/sessions/{session}/status    → {"status": "connected" | ...}
        POST {base}/sessions/{session}/messages  ← {"jid", "text"}
    """

    JID_SUFFIX: Final[str] = "@s.whatsapp.net"
    channel = "whatsapp"

    def __init__(self, base_url: str, api_key: str, session: str, timeout: float | None = None) -> None:
        super().__init__("whatsapp-gateway", "whatsapp", timeout=timeout)
        self._base_url = (base_url or "").rstrip("/")
        self._api_key  = api_key
        self._session  = session

    @property
    def _headers(self) -> dict[str, str]:
        return {"x-api-key": self._api_key, "Content-Type": "application/json"}

    def _url(self, suffix: str) -> str:
        return f"{self._base_url}/sessions/{self._session}/{suffix}"

    @classmethod
    def to_jid(cls, phone: str) -> str:
        digits = "".join(ch for ch in phone if ch.isdigit())
        return f"{digits}{cls.JID_SUFFIX}"

    # ------------------------------------------------------------------
    # implementação da PORTA
    # ------------------------------------------------------------------
    def is_ready(self) -> bool:
        if not self._base_url:
            return False
        try:
            resp = self._request("GET", self._url("status"), headers=self._headers)
        except ChannelUnavailable as exc:
            log.warning("whatsapp.status_unreachable", error=str(exc))
            return False
        except Exception as exc:
            log.warning("whatsapp.status_error", error=str(exc))
            return False
        return (resp.json() or {}).get("status") == "connected"

    def send(self, phone: str, message: str) -> str | None:
        if not phone:
            raise ValueError("phone vazio")
        resp = self._request(
            "POST",
            self._url("messages"),
            json={"jid": self.to_jid(phone), "text": message},
            headers=self._headers,
        )
        provider_id = (resp.json() or {}).get("id") if resp.content else None
        log.info("whatsapp.sent", provider=self.provider, to=phone, provider_id=provider_id)
        return provider_id
