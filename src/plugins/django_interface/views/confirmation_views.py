# ╭────────────────────────────────────────────────────────────────────────────╮
# │  Página pública de confirmação (comprador, via link com token)            │
# ╰────────────────────────────────────────────────────────────────────────────╯
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from order_bot.adapters.config.composition_root import container as ob_container
from order_bot.core.application.commands.order_commands import ConfirmOrderCommand
from order_bot.core.application.queries.order_queries import GetOrderByTokenQuery
from order_bot.core.domain.events.exceptions import AlreadyConfirmedError
from plugins.django_interface.views.errors import error_response

command_bus = ob_container.command_bus()
query_bus = ob_container.query_bus()


class OrderConfirmationView(APIView):
    """
    GET  /api/orders/confirm/<token> → dados públicos do pedido
    POST /api/orders/confirm/<token> → {status: approved|declined|changed, notes?}
    """
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def get(self, request, token: str):
        try:
            order = query_bus.dispatch(GetOrderByTokenQuery(filtros={"token": token}))
        except Exception as exc:
            return error_response(exc)
        return Response({"order": order}, status=status.HTTP_200_OK)

    def post(self, request, token: str):
        data = request.data if hasattr(request.data, "get") else {}
        try:
            order = command_bus.dispatch(
                ConfirmOrderCommand(token=token, status=data.get("status") or "", notes=data.get("notes"))
            )
        except AlreadyConfirmedError as exc:
            return Response(
                {
                    "error": str(exc),
                    "code": "already_confirmed",
                    "order": ob_container.presenter().present(exc.order),
                },
                status=status.HTTP_409_CONFLICT,
            )
        except Exception as exc:
            return error_response(exc)
        return Response({"order": order}, status=status.HTTP_200_OK)
