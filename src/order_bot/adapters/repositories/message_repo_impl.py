from datetime import datetime

from order_bot.core.domain.entities.message_entity import MessageEntity
from order_bot.core.domain.repositories.message_repository import MessageRepository
from plugins.django_interface.models import Message as MessageModel


class MessageRepoImpl(MessageRepository):
    def create_pending(
        self,
        order_id: int,
        client_id: int,
        buyer_id: int,
        channel: str,
        phone: str,
        content: str,
        attempt: int,
    ) -> MessageEntity:
        m = MessageModel.objects.create(
            order_id=order_id,
            client_id=client_id,
            buyer_id=buyer_id,
            message_type=channel,
            recipient_phone=phone,
            message_content=content,
            status=MessageModel.Status.PENDING,
            attempt=attempt,
        )
        return MessageEntity.from_model(m)

    def _finalize(self, message_id: int, **values) -> MessageEntity:
        # só sai de `pending`: linhas terminais não são reescritas
        MessageModel.objects.filter(id=message_id, status=MessageModel.Status.PENDING).update(**values)
        return MessageEntity.from_model(MessageModel.objects.get(id=message_id))

    def mark_sent(self, message_id: int, sent_at: datetime) -> MessageEntity:
        return self._finalize(message_id, status=MessageModel.Status.SENT, sent_at=sent_at)

    def mark_failed(self, message_id: int, error: str) -> MessageEntity:
        return self._finalize(message_id, status=MessageModel.Status.FAILED, error_message=error[:2000])

    def list_for_order(self, order_id: int) -> list[MessageEntity]:
        qs = MessageModel.objects.filter(order_id=order_id).order_by("created_at", "id")
        return [MessageEntity.from_model(m) for m in qs]

    def count_attempts(self, order_id: int, channel: str) -> int:
        return MessageModel.objects.filter(order_id=order_id, message_type=channel).count()
