# ╭────────────────────────────────────────────────────────────────────────────╮
# │  Webhook de pedidos (loja → order-bot)                                    │
# ╰────────────────────────────────────────────────────────────────────────────╯
import structlog
from pydantic import ValidationError as PydanticValidationError
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from order_bot.adapters.config.composition_root import container as ob_container
from order_bot.core.application.commands.order_commands import CreateOrderFromWebhookCommand
from order_bot.core.application.dtos.webhook_order_dto import WebhookOrderDTO
from plugins.django_interface.views.errors import error_response, pydantic_error_response

logger = structlog.get_logger(__name__)
command_bus = ob_container.command_bus()


class OrderWebhookView(APIView):
    """
    POST /api/webhook/order: cria o pedido e agenda WhatsApp/SMS.
    """
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        logger.info("webhook.order_received", order_number=_get(request.data, "order_number"))
        try:
            payload = WebhookOrderDTO.model_validate(request.data)
        except PydanticValidationError as exc:
            logger.warning("webhook.invalid_payload", errors=exc.error_count())
            return pydantic_error_response(exc)

        try:
            order, buyer = command_bus.dispatch(CreateOrderFromWebhookCommand(payload=payload))
        except Exception as exc:
            return error_response(exc)

        return Response(
            {
                "success": True,
                "order": {
                    "id": order.id,
                    "order_number": order.order_number,
                    "status": order.status,
                    "buyer_name": buyer.name,
                },
            },
            status=status.HTTP_201_CREATED,
        )


def _get(data, key):
    return data.get(key) if hasattr(data, "get") else None
