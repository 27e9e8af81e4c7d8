from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class OrderBroadcaster(ABC):
    """Sink de tempo real: empurra o pedido atualizado para os observadores."""

    @abstractmethod
    def broadcast(self, order: dict[str, Any]) -> None:
        ...
