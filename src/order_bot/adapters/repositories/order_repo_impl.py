from datetime import date, datetime, time
from typing import Any

from django.db import DatabaseError, transaction
from django.db.models import Q
from django.utils import timezone
from django.utils.dateparse import parse_date

from order_bot.core.application.cqrs import PagedResult
from order_bot.core.domain.entities.order_entity import CHANNELS, OrderEntity
from order_bot.core.domain.events.exceptions import (
    AlreadyConfirmedError,
    OrderNotFoundError,
    PersistenceError,
)
from order_bot.core.domain.repositories.order_repository import OrderRepository
from plugins.django_interface.models import Order as OrderModel

CREATE_FIELDS = {
    "order_number",
    "client_id",
    "buyer_id",
    "product_name",
    "quantity",
    "total_price",
    "confirmation_token",
    "notes",
    "internal_notes",
    "shipping_address",
    "wilaya",
    "commune",
    "payment_method",
}


def _check_channel(channel: str) -> None:
    if channel not in CHANNELS:
        raise ValueError(f"Canal desconhecido: {channel}")


def _day_bound(value: Any, end: bool = False) -> datetime | None:
    d = value if isinstance(value, date) else parse_date(str(value)) if value else None
    if d is None:
        return None
    return timezone.make_aware(datetime.combine(d, time.max if end else time.min))


class OrderRepoImpl(OrderRepository):
    def create(self, data: dict[str, Any]) -> OrderEntity:
        payload = {k: v for k, v in data.items() if k in CREATE_FIELDS}
        try:
            m = OrderModel.objects.create(status=OrderModel.Status.PENDING, **payload)
        except DatabaseError as exc:
            raise PersistenceError(f"Could not create order: {exc}") from exc
        return OrderEntity.from_model(m)

    def find_by_id(self, order_id: int) -> OrderEntity | None:
        m = OrderModel.objects.filter(id=order_id).first()
        return OrderEntity.from_model(m) if m else None

    def find_by_token(self, token: str) -> OrderEntity | None:
        m = OrderModel.objects.filter(confirmation_token=token).first()
        return OrderEntity.from_model(m) if m else None

    def exists_order_number(self, order_number: str) -> bool:
        return OrderModel.objects.filter(order_number=order_number).exists()

    @transaction.atomic
    def confirm(self, token: str, status: str, notes: str | None, confirmed_at: datetime) -> OrderEntity:
        m = OrderModel.objects.select_for_update().filter(confirmation_token=token).first()
        if m is None:
            raise OrderNotFoundError()
        if m.status != OrderModel.Status.PENDING:
            raise AlreadyConfirmedError(OrderEntity.from_model(m))

        m.status = status
        m.confirmed_at = confirmed_at
        fields = ["status", "confirmed_at", "updated_at"]
        if notes is not None:
            m.notes = notes
            fields.append("notes")
        m.save(update_fields=fields)
        return OrderEntity.from_model(m)

    def mark_scheduled(self, order_id: int, channel: str, eta: datetime) -> None:
        _check_channel(channel)
        OrderModel.objects.filter(id=order_id).update(**{f"{channel}_scheduled_at": eta})

    def mark_sent(self, order_id: int, channel: str, sent_at: datetime) -> bool:
        _check_channel(channel)
        # UPDATE condicional: nunca reverte nem reescreve uma flag já verdadeira
        updated = OrderModel.objects.filter(id=order_id, **{f"{channel}_sent": False}).update(
            **{f"{channel}_sent": True, f"{channel}_sent_at": sent_at, "updated_at": timezone.now()}
        )
        return updated == 1

    def find_needing_notification(
        self, stale_before: datetime, created_after: datetime, limit: int
    ) -> list[OrderEntity]:
        whatsapp_due = Q(whatsapp_sent=False) & (
            Q(whatsapp_scheduled_at__isnull=True) | Q(whatsapp_scheduled_at__lt=stale_before)
        )
        sms_due = (
            Q(client__bot_settings__sms_enabled=True)
            & Q(sms_sent=False)
            & (Q(sms_scheduled_at__isnull=True) | Q(sms_scheduled_at__lt=stale_before))
        )
        qs = (
            OrderModel.objects.filter(status=OrderModel.Status.PENDING, created_at__gte=created_after)
            .filter(whatsapp_due | sms_due)
            .order_by("created_at", "id")[:limit]
        )
        return [OrderEntity.from_model(m) for m in qs]

    def search(
        self, client_id: int, filtros: dict[str, Any] | None, page: int, page_size: int
    ) -> PagedResult[OrderEntity]:
        filtros = filtros or {}
        qs = OrderModel.objects.filter(client_id=client_id).select_related("buyer")

        for key in ("status", "payment_status", "delivery_status"):
            if filtros.get(key):
                qs = qs.filter(**{key: filtros[key]})
        if start := _day_bound(filtros.get("start_date")):
            qs = qs.filter(created_at__gte=start)
        if end := _day_bound(filtros.get("end_date"), end=True):
            qs = qs.filter(created_at__lte=end)
        if term := (filtros.get("search") or "").strip():
            qs = qs.filter(
                Q(order_number__icontains=term)
                | Q(product_name__icontains=term)
                | Q(buyer__name__icontains=term)
            )

        total = qs.count()
        offset = (page - 1) * page_size
        objs_page = qs.order_by("-created_at", "-id")[offset : offset + page_size]
        items = [OrderEntity.from_model(obj) for obj in objs_page]
        return PagedResult(items=items, total=total, page=page, page_size=page_size)
