from dataclasses import dataclass
from typing import Any

from order_bot.core.application.cqrs import PaginatedQueryDTO, QueryDTO


@dataclass(frozen=True)
class GetOrderByTokenQuery(QueryDTO[dict[str, Any]]):
    """filtros = {"token": str}"""
    pass

@dataclass(frozen=True)
class ListOrdersQuery(PaginatedQueryDTO[dict[str, Any]]):
    """filtros aceitos: client_id (obrigatório), status, payment_status, delivery_status, start_date, end_date, search"""
    pass

@dataclass(frozen=True)
class ListOrderMessagesQuery(QueryDTO[dict[str, Any]]):
    """filtros = {"order_id": int}"""
    pass
