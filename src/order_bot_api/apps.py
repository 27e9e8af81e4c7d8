from django.apps import AppConfig


class OrderBotConfig(AppConfig):
    name = "order_bot_api"
    verbose_name = "Order Bot API"

    def ready(self):
        from django.conf import settings

        # ─── DI container ───────────────────────────────────────────
        from order_bot.adapters.config.composition_root import (
            setup_di_container_from_settings as build_container,
        )

        build_container(settings)
