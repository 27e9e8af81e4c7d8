import os

from celery import Celery

from config.structlog_config import configure_logging

configure_logging()

# Define o módulo de configurações do Django para o Celery.
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

app = Celery('order_bot_api')

# Todas as configurações do Celery começam com CELERY_ no settings.py
app.config_from_object('django.conf:settings', namespace='CELERY')

# Procura tasks.py nos apps de INSTALLED_APPS
app.autodiscover_tasks()
