"""
Taxonomia de erros do order-bot.

Erros de entrada (4xx) e de infraestrutura (5xx) sobem para a camada HTTP;
erros de canal ficam no worker e alimentam a política de retentativa.
"""
from __future__ import annotations

from typing import Any


class OrderBotError(Exception):
    """Classe base para todas as exceções de domínio."""
    pass

# ───────────────────────────────────────────────
# Entrada
# ───────────────────────────────────────────────
class ValidationError(OrderBotError):
    def __init__(self, message: str, fields: list[str] | None = None) -> None:
        super().__init__(message)
        self.fields = fields or []

class DuplicateOrderError(ValidationError):
    def __init__(self, order_number: str) -> None:
        super().__init__(f"Order number already exists: {order_number}", fields=["order_number"])
        self.order_number = order_number

class TemplateError(ValidationError):
    """Template customizado do cliente não compila."""
    pass

class NotFoundError(OrderBotError):
    pass

class ClientNotFoundError(NotFoundError):
    def __init__(self, client_id: Any) -> None:
        super().__init__(f"Client not found: {client_id}")
        self.client_id = client_id

class OrderNotFoundError(NotFoundError):
    def __init__(self, message: str = "Order not found") -> None:
        super().__init__(message)

class AlreadyConfirmedError(OrderBotError):
    """
    O pedido já saiu de `pending`. Não é um erro genérico: o chamador
    precisa saber que a decisão anterior prevaleceu.
    """
    def __init__(self, order: Any) -> None:
        super().__init__(f"Order already {order.status}")
        self.order = order

# ───────────────────────────────────────────────
# Infraestrutura
# ───────────────────────────────────────────────
class PersistenceError(OrderBotError):
    pass

class SchedulingError(OrderBotError):
    """Falha ao enfileirar um job; não há retentativa no agendador."""
    def __init__(self, message: str, channel: str | None = None) -> None:
        super().__init__(message)
        self.channel = channel

# ───────────────────────────────────────────────
# Canais de notificação
# ───────────────────────────────────────────────
class NotificationError(OrderBotError):
    """Classe base para erros de envio. Sempre retentáveis pelo worker."""
    pass

class ChannelUnavailable(NotificationError):
    """
    Canal não está pronto (sessão WhatsApp desconectada, provedor fora do ar,
    timeout de rede).
    """
    pass

class DeliveryFailure(NotificationError):
    """O provedor recebeu a chamada e a rejeitou."""
    pass
