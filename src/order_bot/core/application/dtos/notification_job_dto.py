from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class RetryPolicy:
    """
    Política de retentativa anexada ao job no momento do enfileiramento.

    Fixa por canal (não ajustável por cliente): `max_attempts` tentativas,
    espera `base_delay_seconds * 2^(n-1)` depois da n-ésima falha.
    """
    max_attempts: int = 3
    base_delay_seconds: int = 60

    def countdown_for(self, failed_attempt: int) -> int:
        return self.base_delay_seconds * (2 ** max(failed_attempt - 1, 0))

    def has_attempts_left(self, failed_attempt: int) -> bool:
        return failed_attempt < self.max_attempts


class NotificationJobDTO(BaseModel):
    """Payload de um job de envio (serializado em JSON no broker)."""
    order_id: int
    client_id: int
    buyer_id: int
    channel: Literal["whatsapp", "sms"]
    phone: str
    message: str
    max_attempts: int = Field(default=3, ge=1)
    backoff_seconds: int = Field(default=60, ge=0)

    @property
    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(max_attempts=self.max_attempts, base_delay_seconds=self.backoff_seconds)
