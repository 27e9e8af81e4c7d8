import time

import structlog
from django.conf import settings
from django.core.management.base import BaseCommand

from order_bot.adapters.config.composition_root import container as ob_container
from order_bot.core.application.commands.notification_commands import SweepUnsentOrdersCommand

logger = structlog.get_logger(__name__)


class Command(BaseCommand):
    help = "Reagenda o envio de pedidos pendentes que nunca foram notificados (uma vez ou em loop)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--loop",
            action="store_true",
            default=False,
            help="Roda indefinidamente a cada ORDER_MONITOR_INTERVAL_SECONDS",
        )
        parser.add_argument(
            "--batch-size",
            type=int,
            default=settings.ORDER_MONITOR_BATCH_SIZE,
            help=f"Máximo de pedidos por varredura (default: {settings.ORDER_MONITOR_BATCH_SIZE})",
        )
        parser.add_argument(
            "--interval",
            type=int,
            default=settings.ORDER_MONITOR_INTERVAL_SECONDS,
            help="Intervalo entre varreduras em segundos (apenas com --loop)",
        )

    def handle(self, *args, **opts):
        bus = ob_container.command_bus()
        cmd = SweepUnsentOrdersCommand(batch_size=opts["batch_size"])

        while True:
            try:
                events = bus.dispatch(cmd)
                self.stdout.write(self.style.SUCCESS(f"Pedidos reagendados: {len(events)}"))
            except Exception as exc:
                if not opts["loop"]:
                    raise
                logger.error("monitor.sweep_failed", error=str(exc), exc_info=True)

            if not opts["loop"]:
                return
            time.sleep(opts["interval"])
