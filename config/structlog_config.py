import logging
import os
import sys

import structlog
from structlog.processors import CallsiteParameter, CallsiteParameterAdder

# Bibliotecas muito verbosas em DEBUG
NOISY_LOGGERS = ("httpx", "httpcore", "kombu", "amqp", "asyncio", "daphne")


def configure_logging(
    level: str | None = None,
    json_logs: bool = bool(os.getenv("JSON_LOGS", "")),
) -> None:
    """
    Configura structlog + logging da stdlib num único pipeline.

     - `json_logs` ativa JSONRenderer (produção, coletores de log).
     - Caso contrário, ConsoleRenderer colorido para desenvolvimento.
     - `level` cai para a env LOG_LEVEL e, por fim, INFO.

    Deve ser chamado antes de qualquer import que crie loggers.
    """
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()

    pre_chain = [
        structlog.contextvars.merge_contextvars,     # request_id, order_id ...
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    final_processor = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            *pre_chain,
            CallsiteParameterAdder(
                parameters=[
                    CallsiteParameter.MODULE,
                    CallsiteParameter.FUNC_NAME,
                    CallsiteParameter.LINENO,
                ]
            ),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level)
        ),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=final_processor,
        foreign_pre_chain=pre_chain,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.getLevelName(level), logging.WARNING))

    logging.captureWarnings(True)
