from dependency_injector import containers, providers

container = None

def setup_di_container_from_settings(settings):
    """Inicializa o DI container após o Django já estar com settings carregados."""
    global container  # noqa: PLW0603
    if container is not None:
        import structlog
        structlog.get_logger().debug("DI container já inicializado.")
        return container

    # ------- IMPORTS DE INFRA E ADAPTERS -------
    import structlog

    from order_bot.adapters.message_broker.queue_clients import (
        CeleryClientNotifier,
        CeleryQueueClient,
        InMemoryQueueClient,
    )
    from order_bot.adapters.notifiers.email.order_status_email import OrderStatusEmailNotifier
    from order_bot.adapters.notifiers.registry import get_email_notifier, get_sender
    from order_bot.adapters.observability import metrics
    from order_bot.adapters.realtime.broadcaster import ChannelsOrderBroadcaster

    # Repositórios concretos (Django ORM)
    from order_bot.adapters.repositories.bot_settings_repo_impl import BotSettingsRepoImpl
    from order_bot.adapters.repositories.buyer_repo_impl import BuyerRepoImpl
    from order_bot.adapters.repositories.client_repo_impl import ClientRepoImpl
    from order_bot.adapters.repositories.message_repo_impl import MessageRepoImpl
    from order_bot.adapters.repositories.order_repo_impl import OrderRepoImpl

    # ------- IMPORTS DO CORE -------
    # Commands
    from order_bot.core.application.commands.bot_settings_commands import UpdateBotSettingsCommand
    from order_bot.core.application.commands.notification_commands import (
        DispatchNotificationCommand,
        SweepUnsentOrdersCommand,
    )
    from order_bot.core.application.commands.order_commands import (
        ConfirmOrderCommand,
        CreateOrderFromWebhookCommand,
    )

    # CQRS
    from order_bot.core.application.cqrs import CommandBusImpl, QueryBusImpl
    from order_bot.core.application.dtos.notification_job_dto import RetryPolicy

    # Handlers
    from order_bot.core.application.handlers.bot_settings_handlers import (
        GetBotSettingsHandler,
        PreviewTemplateHandler,
        UpdateBotSettingsHandler,
    )
    from order_bot.core.application.handlers.notification_handlers import (
        DispatchNotificationHandler,
        SweepUnsentOrdersHandler,
    )
    from order_bot.core.application.handlers.order_handlers import (
        ConfirmOrderHandler,
        CreateOrderFromWebhookHandler,
        GetOrderByTokenHandler,
        ListOrderMessagesHandler,
        ListOrdersHandler,
    )
    from order_bot.core.application.queries.bot_settings_queries import GetBotSettingsQuery, PreviewTemplateQuery
    from order_bot.core.application.queries.order_queries import (
        GetOrderByTokenQuery,
        ListOrderMessagesQuery,
        ListOrdersQuery,
    )

    # Serviços de aplicação
    from order_bot.core.application.services.notification_scheduler import NotificationScheduler
    from order_bot.core.application.services.order_presenter import OrderPresenter
    from order_bot.core.application.services.token_service import ConfirmationTokenService

    # Eventos
    from order_bot.core.domain.events.events import (
        NotificationFailedEvent,
        NotificationScheduledEvent,
        NotificationSentEvent,
        OrderConfirmedEvent,
        OrderReceivedEvent,
    )
    from order_bot.core.domain.services.event_dispatcher import EventDispatcher

    # ------- DECLARAÇÃO DO CONTAINER -------
    class Container(containers.DeclarativeContainer):
        config = providers.Configuration()

        # Infra & integração
        logger = providers.Singleton(structlog.get_logger)
        event_dispatcher = providers.Singleton(EventDispatcher)

        # CQRS
        command_bus = providers.Singleton(CommandBusImpl, dispatcher=event_dispatcher)
        query_bus = providers.Singleton(QueryBusImpl)

        # Fila durável: Celery em produção, memória em processo único/testes
        queue_client = providers.Selector(
            config.queue_backend,
            celery=providers.Singleton(CeleryQueueClient),
            memory=providers.Singleton(InMemoryQueueClient),
        )
        retry_policy = providers.Singleton(
            RetryPolicy,
            max_attempts=config.notification.max_attempts,
            base_delay_seconds=config.notification.backoff_seconds,
        )
        sender_factory = providers.Object(get_sender)

        # Implementações de Repositórios (Ports → Adapters)
        client_repo = providers.Singleton(ClientRepoImpl)
        buyer_repo = providers.Singleton(BuyerRepoImpl)
        bot_settings_repo = providers.Singleton(BotSettingsRepoImpl)
        order_repo = providers.Singleton(OrderRepoImpl)
        message_repo = providers.Singleton(MessageRepoImpl)

        # Sinks externos
        broadcaster = providers.Singleton(ChannelsOrderBroadcaster)
        email_notifier = providers.Singleton(get_email_notifier)
        order_status_email = providers.Singleton(
            OrderStatusEmailNotifier,
            email=email_notifier,
            order_repo=order_repo,
            client_repo=client_repo,
            buyer_repo=buyer_repo,
            dashboard_url=config.dashboard_url,
        )
        # Com Celery o e-mail sai do request de confirmação e vai para um worker
        client_notifier = providers.Selector(
            config.queue_backend,
            celery=providers.Singleton(CeleryClientNotifier),
            memory=order_status_email,
        )

        # Serviços de negócio
        presenter = providers.Singleton(
            OrderPresenter,
            buyer_repo=buyer_repo,
            client_repo=client_repo,
            bot_settings_repo=bot_settings_repo,
        )
        token_service = providers.Singleton(
            ConfirmationTokenService,
            order_repo=order_repo,
            presenter=presenter,
            dispatcher=event_dispatcher,
        )
        scheduler = providers.Singleton(
            NotificationScheduler,
            client_repo=client_repo,
            bot_settings_repo=bot_settings_repo,
            order_repo=order_repo,
            queue_client=queue_client,
            retry_policy=retry_policy,
            base_url=config.public_base_url,
        )

        # Handlers de comandos
        create_order_handler = providers.Factory(
            CreateOrderFromWebhookHandler,
            client_repo=client_repo,
            buyer_repo=buyer_repo,
            order_repo=order_repo,
            token_service=token_service,
            scheduler=scheduler,
            dispatcher=event_dispatcher,
        )
        confirm_order_handler = providers.Factory(
            ConfirmOrderHandler,
            token_service=token_service,
            presenter=presenter,
        )
        dispatch_notification_handler = providers.Factory(
            DispatchNotificationHandler,
            order_repo=order_repo,
            message_repo=message_repo,
            sender_factory=sender_factory,
            dispatcher=event_dispatcher,
        )
        sweep_unsent_orders_handler = providers.Factory(
            SweepUnsentOrdersHandler,
            order_repo=order_repo,
            buyer_repo=buyer_repo,
            bot_settings_repo=bot_settings_repo,
            message_repo=message_repo,
            scheduler=scheduler,
            retry_policy=retry_policy,
            stale_minutes=config.monitor.stale_minutes,
            max_redrives=config.monitor.max_redrives,
            max_age_hours=config.monitor.max_age_hours,
        )
        update_bot_settings_handler = providers.Factory(
            UpdateBotSettingsHandler,
            client_repo=client_repo,
            bot_settings_repo=bot_settings_repo,
        )

        # Handlers de queries
        get_order_by_token_handler = providers.Factory(GetOrderByTokenHandler, token_service=token_service)
        list_orders_handler = providers.Factory(ListOrdersHandler, client_repo=client_repo, order_repo=order_repo)
        list_order_messages_handler = providers.Factory(
            ListOrderMessagesHandler,
            order_repo=order_repo,
            message_repo=message_repo,
        )
        get_bot_settings_handler = providers.Factory(
            GetBotSettingsHandler,
            client_repo=client_repo,
            bot_settings_repo=bot_settings_repo,
        )
        preview_template_handler = providers.Factory(
            PreviewTemplateHandler,
            client_repo=client_repo,
            bot_settings_repo=bot_settings_repo,
            scheduler=scheduler,
        )

        def init(self):
            # Registrar comandos no CommandBus
            bus = self.command_bus()
            bus.register(CreateOrderFromWebhookCommand, self.create_order_handler())
            bus.register(ConfirmOrderCommand, self.confirm_order_handler())
            bus.register(DispatchNotificationCommand, self.dispatch_notification_handler())
            bus.register(SweepUnsentOrdersCommand, self.sweep_unsent_orders_handler())
            bus.register(UpdateBotSettingsCommand, self.update_bot_settings_handler())

            # Registrar queries no QueryBus
            qb = self.query_bus()
            qb.register(GetOrderByTokenQuery, self.get_order_by_token_handler())
            qb.register(ListOrdersQuery, self.list_orders_handler())
            qb.register(ListOrderMessagesQuery, self.list_order_messages_handler())
            qb.register(GetBotSettingsQuery, self.get_bot_settings_handler())
            qb.register(PreviewTemplateQuery, self.preview_template_handler())

            # Assinantes de eventos (realtime, e-mail ao lojista, métricas)
            dispatcher = self.event_dispatcher()
            dispatcher.subscribe(OrderConfirmedEvent, self.broadcaster().on_order_confirmed)
            dispatcher.subscribe(OrderConfirmedEvent, self.client_notifier().on_order_confirmed)
            dispatcher.subscribe(OrderConfirmedEvent, metrics.on_order_confirmed)
            dispatcher.subscribe(OrderReceivedEvent, metrics.on_order_received)
            dispatcher.subscribe(NotificationScheduledEvent, metrics.on_notification_scheduled)
            dispatcher.subscribe(NotificationSentEvent, metrics.on_notification_sent)
            dispatcher.subscribe(NotificationFailedEvent, metrics.on_notification_failed)

    # ------- INSTANCIAÇÃO E CONFIG -------
    container = Container()
    container.config.queue_backend.from_value(settings.ORDER_BOT_QUEUE_BACKEND)
    container.config.public_base_url.from_value(settings.PUBLIC_BASE_URL)
    container.config.dashboard_url.from_value(settings.DASHBOARD_URL)
    container.config.notification.max_attempts.from_value(settings.NOTIFICATION_MAX_ATTEMPTS)
    container.config.notification.backoff_seconds.from_value(settings.NOTIFICATION_BACKOFF_SECONDS)
    container.config.monitor.stale_minutes.from_value(settings.ORDER_MONITOR_STALE_MINUTES)
    container.config.monitor.max_redrives.from_value(settings.ORDER_MONITOR_MAX_REDRIVES)
    container.config.monitor.max_age_hours.from_value(settings.ORDER_MONITOR_MAX_AGE_HOURS)

    # Inicializa os buses com todos os handlers
    Container.init(container)
    return container
