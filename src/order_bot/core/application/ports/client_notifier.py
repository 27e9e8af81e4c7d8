from __future__ import annotations

from abc import ABC, abstractmethod


class ClientNotifier(ABC):
    """Sink externo que avisa o lojista quando o comprador decide."""

    @abstractmethod
    def notify_order_status(self, order_id: int) -> None:
        ...
