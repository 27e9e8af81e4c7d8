"""
Settings de teste: banco em memória, fila em processo e camadas
de cache/canais locais. Nenhum broker ou Redis é necessário.
"""
from config.settings import *  # noqa: F403

DEBUG = False
SECRET_KEY = "order-bot-test-secret"
ALLOWED_HOSTS = ["testserver", "localhost"]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

ORDER_BOT_QUEUE_BACKEND = "memory"
PUBLIC_BASE_URL = "https://shop.example.com"
DASHBOARD_URL = "https://shop.example.com/dashboard/orders"
BREVO_API_KEY = ""

CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "order-bot-tests",
    }
}

CHANNEL_LAYERS = {
    "default": {"BACKEND": "channels.layers.InMemoryChannelLayer"},
}

STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]
