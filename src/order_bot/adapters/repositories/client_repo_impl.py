from datetime import datetime

from django.db import transaction

from order_bot.core.domain.entities.client_entity import ClientEntity
from order_bot.core.domain.repositories.client_repository import ClientRepository
from plugins.django_interface.models import Client as ClientModel


class ClientRepoImpl(ClientRepository):
    def find_by_id(self, client_id: int) -> ClientEntity | None:
        try:
            return ClientEntity.from_model(ClientModel.objects.get(id=client_id))
        except (ClientModel.DoesNotExist, ValueError, TypeError):
            return None

    def find_by_email(self, email: str) -> ClientEntity | None:
        m = ClientModel.objects.filter(email__iexact=email).first()
        return ClientEntity.from_model(m) if m else None

    def set_reset_token(self, client_id: int, token: str, expires_at: datetime) -> None:
        ClientModel.objects.filter(id=client_id).update(
            reset_token=token,
            reset_token_expires_at=expires_at,
        )

    @transaction.atomic
    def consume_reset_token(self, token: str, now: datetime) -> ClientEntity | None:
        if not token:
            return None
        m = ClientModel.objects.select_for_update().filter(reset_token=token).first()
        if m is None:
            return None
        expired = m.reset_token_expires_at is None or m.reset_token_expires_at <= now
        # uso único: o token some mesmo se já estiver expirado
        m.reset_token = None
        m.reset_token_expires_at = None
        m.save(update_fields=["reset_token", "reset_token_expires_at", "updated_at"])
        return None if expired else ClientEntity.from_model(m)
