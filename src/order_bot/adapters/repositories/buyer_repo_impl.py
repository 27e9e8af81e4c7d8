from django.db import IntegrityError, transaction

from order_bot.core.domain.entities.buyer_entity import BuyerEntity
from order_bot.core.domain.repositories.buyer_repository import BuyerRepository
from plugins.django_interface.models import Buyer as BuyerModel


class BuyerRepoImpl(BuyerRepository):
    def find_by_id(self, buyer_id: int) -> BuyerEntity | None:
        m = BuyerModel.objects.filter(id=buyer_id).first()
        return BuyerEntity.from_model(m) if m else None

    def find_or_create(
        self,
        client_id: int,
        phone: str,
        name: str,
        email: str | None = None,
        address: str | None = None,
    ) -> tuple[BuyerEntity, bool]:
        defaults = {"name": name, "email": email, "address": address}
        try:
            with transaction.atomic():
                m, created = BuyerModel.objects.get_or_create(
                    client_id=client_id, phone=phone, defaults=defaults
                )
        except IntegrityError:
            # corrida com outro webhook do mesmo comprador
            m, created = BuyerModel.objects.get(client_id=client_id, phone=phone), False

        if not created:
            # completa dados que o comprador ainda não tinha
            dirty = []
            for field, value in (("email", email), ("address", address)):
                if value and not getattr(m, field):
                    setattr(m, field, value)
                    dirty.append(field)
            if dirty:
                m.save(update_fields=[*dirty, "updated_at"])
        return BuyerEntity.from_model(m), created
