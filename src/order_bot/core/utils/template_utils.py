from __future__ import annotations

from dataclasses import asdict, dataclass
from functools import lru_cache
from typing import Any

from django.template import Context, Engine, TemplateSyntaxError

from order_bot.core.domain.events.exceptions import TemplateError

# Variáveis aceitas nos templates de WhatsApp/SMS
TEMPLATE_VARIABLES = (
    "buyer_name",
    "order_number",
    "product_name",
    "quantity",
    "total_price",
    "confirmation_link",
    "company_name",
    "support_phone",
    "store_url",
)


@dataclass(frozen=True)
class TemplateContext:
    buyer_name: str = ""
    order_number: str = ""
    product_name: str = ""
    quantity: str = ""
    total_price: str = ""
    confirmation_link: str = ""
    company_name: str = ""
    support_phone: str = ""
    store_url: str = ""

    @classmethod
    def build(cls, **values: Any) -> TemplateContext:
        """Converte tudo para str; None vira vazio, chaves desconhecidas são ignoradas."""
        return cls(**{
            k: "" if values.get(k) is None else str(values[k])
            for k in TEMPLATE_VARIABLES
            if k in values
        })

    def as_dict(self) -> dict[str, str]:
        return asdict(self)


# Contexto usado só para o ensaio de renderização em validate_template
SAMPLE_CONTEXT = TemplateContext.build(**{name: name for name in TEMPLATE_VARIABLES})


class _SubstitutionEngine(Engine):
    """Sem tags nem filtros: `{% ... %}` e `|filtro` não compilam."""
    default_builtins: list[str] = []


@lru_cache(maxsize=1)
def _engine() -> Engine:
    # sem loaders: nada de include/extends lendo arquivos
    return _SubstitutionEngine(loaders=[], libraries={}, autoescape=False, string_if_invalid="")


def _compile(template_str: str):
    try:
        return _engine().from_string(template_str or "")
    except TemplateSyntaxError as exc:
        raise TemplateError(f"Invalid template: {exc}", fields=["template"]) from exc


def render_message(template_str: str, context: TemplateContext | dict) -> str:
    """
    Substitui placeholders `{{ var }}` num template de texto.

    Função pura: nenhum acesso a banco ou rede. Só há substituição de
    variáveis; variáveis desconhecidas viram string vazia e não há
    autoescape, pois o destino é texto puro.

    Exemplo:
        render_message("Olá {{buyer_name}}", TemplateContext(buyer_name="Ali"))
        → "Olá Ali"
    """
    data = context.as_dict() if isinstance(context, TemplateContext) else dict(context)
    tpl = _compile(template_str)
    try:
        return tpl.render(Context(data, autoescape=False))
    except Exception as exc:
        raise TemplateError(f"Template failed to render: {exc}", fields=["template"]) from exc


def validate_template(template_str: str) -> None:
    """Levanta TemplateError se o texto não compila ou não renderiza com dados de exemplo."""
    render_message(template_str, SAMPLE_CONTEXT)
