"""
Tradução das exceções de domínio para respostas HTTP.
"""
import structlog
from rest_framework import status
from rest_framework.response import Response

from order_bot.core.domain.events.exceptions import (
    NotFoundError,
    OrderBotError,
    PersistenceError,
    SchedulingError,
    ValidationError,
)

logger = structlog.get_logger(__name__)


def error_response(exc: Exception) -> Response:
    if isinstance(exc, ValidationError):
        body = {"error": str(exc)}
        if exc.fields:
            body["fields"] = exc.fields
        return Response(body, status=status.HTTP_400_BAD_REQUEST)
    if isinstance(exc, NotFoundError):
        return Response({"error": str(exc)}, status=status.HTTP_404_NOT_FOUND)
    if isinstance(exc, SchedulingError | PersistenceError):
        logger.error("http.infra_error", error_type=type(exc).__name__, error=str(exc))
        return Response({"error": str(exc)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    if isinstance(exc, OrderBotError):
        logger.error("http.domain_error", error_type=type(exc).__name__, error=str(exc))
        return Response({"error": str(exc)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    logger.exception("http.unexpected_error", error=str(exc))
    return Response({"error": "Internal server error"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


def pydantic_error_response(exc) -> Response:
    """pydantic.ValidationError → 400 com os campos inválidos."""
    fields = sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors()})
    return Response(
        {"error": "Invalid payload", "fields": fields},
        status=status.HTTP_400_BAD_REQUEST,
    )
