from dataclasses import dataclass
from typing import Any

from order_bot.core.application.cqrs import QueryDTO


@dataclass(frozen=True)
class GetBotSettingsQuery(QueryDTO[dict[str, Any]]):
    """filtros = {"client_id": int}"""
    pass

@dataclass(frozen=True)
class PreviewTemplateQuery(QueryDTO[dict[str, Any]]):
    """filtros = {"client_id": int, "channel": str, "template": str | None}"""
    pass
