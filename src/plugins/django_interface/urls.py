from django.conf import settings
from django.urls import path
from drf_yasg import openapi
from drf_yasg.views import get_schema_view
from rest_framework import permissions

from .views.bot_settings_views import BotSettingsView, TemplatePreviewView
from .views.confirmation_views import OrderConfirmationView
from .views.health_views import HealthCheckView
from .views.order_views import ClientOrderListView, OrderMessagesView
from .views.webhook_views import OrderWebhookView

swagger_permissions = [permissions.IsAdminUser] if not settings.DEBUG else [permissions.AllowAny]

schema_view = get_schema_view(
    openapi.Info(
        title="Order Bot",
        default_version="v1",
        description="Webhook de pedidos, confirmação pública e configuração do bot",
    ),
    public=settings.DEBUG,
    permission_classes=swagger_permissions,
)

urlpatterns = [
    path("healthz/", HealthCheckView.as_view(), name="healthz"),

    # Loja → bot
    path("webhook/order", OrderWebhookView.as_view(), name="webhook-order"),

    # Comprador (link público)
    path("orders/confirm/<str:token>", OrderConfirmationView.as_view(), name="order-confirm"),

    # Dashboard
    path("clients/<int:client_id>/bot-settings/", BotSettingsView.as_view(), name="bot-settings"),
    path("clients/<int:client_id>/bot-settings/preview/", TemplatePreviewView.as_view(), name="bot-settings-preview"),
    path("clients/<int:client_id>/orders/", ClientOrderListView.as_view(), name="client-orders"),
    path("orders/<int:order_id>/messages/", OrderMessagesView.as_view(), name="order-messages"),

    path("swagger/",     schema_view.with_ui("swagger", cache_timeout=0), name="swagger-ui"),
    path("swagger.json", schema_view.without_ui(cache_timeout=0),         name="swagger-json"),
    path("redoc/",       schema_view.with_ui("redoc",   cache_timeout=0), name="redoc-ui"),
]
