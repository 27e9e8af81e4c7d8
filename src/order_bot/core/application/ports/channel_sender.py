from __future__ import annotations

from abc import ABC, abstractmethod


class ChannelSender(ABC):
    """
    Capacidade de envio de um canal (WhatsApp, SMS).

    `send` levanta ChannelUnavailable / DeliveryFailure; retornar normalmente
    significa que o provedor aceitou a mensagem.
    """
    channel: str

    @abstractmethod
    def send(self, phone: str, message: str) -> str | None:
        """Envia e devolve o id do provedor, quando houver."""
        ...

    def is_ready(self) -> bool:
        return True
