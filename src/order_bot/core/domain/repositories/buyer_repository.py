from abc import ABC, abstractmethod

from order_bot.core.domain.entities.buyer_entity import BuyerEntity


class BuyerRepository(ABC):
    @abstractmethod
    def find_by_id(self, buyer_id: int) -> BuyerEntity | None:
        ...

    @abstractmethod
    def find_or_create(
        self,
        client_id: int,
        phone: str,
        name: str,
        email: str | None = None,
        address: str | None = None,
    ) -> tuple[BuyerEntity, bool]:
        """Busca sempre escopada por (client_id, phone). Retorna (buyer, criado?)."""
        ...
