from __future__ import annotations

import structlog

from order_bot.adapters.notifiers.base import BaseNotifier

logger = structlog.get_logger()


class BrevoEmail(BaseNotifier):
    """
    Envia e-mails HTML usando a API Brevo Transactional Emails v3.
    """

    ENDPOINT = "https://api.brevo.com/v3/smtp/email"

    def __init__(self, api_key: str, from_email: str, timeout: float | None = None):
        super().__init__("brevo", "email", timeout=timeout)
        self._api_key    = api_key
        self._from_email = from_email

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def send(self, recipients: list[str], subject: str, html: str) -> None:
        if not recipients:
            return

        payload = {
            "sender":      {"email": self._from_email},
            "to":          [{"email": r} for r in recipients],
            "subject":     subject,
            "htmlContent": html,
        }
        headers = {
            "api-key":      self._api_key,
            "accept":       "application/json",
            "content-type": "application/json",
        }

        # e-mail não passa pela fila: retentativa local com backoff
        self._request_with_retry("POST", self.ENDPOINT, json=payload, headers=headers)

        logger.info(
            "email.sent",
            provider=self.provider,
            from_=self._from_email,
            recipients=len(recipients),
            subject=subject,
        )
