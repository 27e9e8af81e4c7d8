from abc import ABC, abstractmethod
from datetime import datetime

from order_bot.core.domain.entities.client_entity import ClientEntity


class ClientRepository(ABC):
    @abstractmethod
    def find_by_id(self, client_id: int) -> ClientEntity | None:
        ...

    @abstractmethod
    def find_by_email(self, email: str) -> ClientEntity | None:
        ...

    @abstractmethod
    def set_reset_token(self, client_id: int, token: str, expires_at: datetime) -> None:
        """Grava (ou substitui) o token de redefinição de senha."""
        ...

    @abstractmethod
    def consume_reset_token(self, token: str, now: datetime) -> ClientEntity | None:
        """Uso único: devolve o cliente e limpa o token; expirado ou inexistente → None."""
        ...
