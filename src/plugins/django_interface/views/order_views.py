# ╭────────────────────────────────────────────────────────────────────────────╮
# │  Leitura de pedidos para o dashboard                                      │
# │                                                                            │
# │  • Filtro seguro   → remove “page” / “page_size” antes de passar ao repo   │
# │  • Paginação DRY   → mix-in centralizado                                   │
# ╰────────────────────────────────────────────────────────────────────────────╯
from __future__ import annotations

from typing import Any

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from order_bot.adapters.config.composition_root import container as ob_container
from order_bot.core.application.queries.order_queries import ListOrderMessagesQuery, ListOrdersQuery
from plugins.django_interface.serializers.order_serializers import MessageSerializer, OrderSerializer
from plugins.django_interface.views.errors import error_response

query_bus = ob_container.query_bus()

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200


class PaginationFilterMixin:
    """Remove page/page_size do QueryDict e devolve filtros limpos."""

    @staticmethod
    def _pagination(request) -> tuple[int, int]:
        try:
            page = max(int(request.query_params.get("page", 1)), 1)
            size = int(request.query_params.get("page_size", DEFAULT_PAGE_SIZE))
        except ValueError:
            return 1, DEFAULT_PAGE_SIZE
        return page, min(max(size, 1), MAX_PAGE_SIZE)

    @staticmethod
    def _filters(request) -> dict[str, Any]:
        params = request.query_params.copy()
        params.pop("page", None)
        params.pop("page_size", None)
        return {key: params.get(key) for key in params}


class ClientOrderListView(PaginationFilterMixin, APIView):
    """GET /api/clients/<client_id>/orders/"""

    def get(self, request, client_id: int):
        page, page_size = self._pagination(request)
        filtros = self._filters(request)
        filtros["client_id"] = client_id
        try:
            res = query_bus.dispatch(ListOrdersQuery(filtros=filtros, page=page, page_size=page_size))
        except Exception as exc:
            return error_response(exc)

        payload = {
            "results": OrderSerializer(res.items, many=True).data,
            "total_items": res.total,
            "page": res.page,
            "page_size": res.page_size,
            "total_pages": res.total_pages,
            "items_on_page": len(res.items),
        }
        return Response(payload, status=status.HTTP_200_OK)


class OrderMessagesView(APIView):
    """GET /api/orders/<order_id>/messages/"""

    def get(self, request, order_id: int):
        try:
            messages = query_bus.dispatch(ListOrderMessagesQuery(filtros={"order_id": order_id}))
        except Exception as exc:
            return error_response(exc)
        return Response({"results": MessageSerializer(messages, many=True).data})
