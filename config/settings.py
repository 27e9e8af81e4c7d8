from pathlib import Path

from decouple import Csv, config

# -------------------------------
# Diretórios base
# -------------------------------
BASE_DIR = Path(__file__).resolve().parent.parent

# -------------------------------
# Segurança e debug
# -------------------------------
SECRET_KEY = config('SECRET_KEY', default='order-bot-dev-secret-key-change-me')
DEBUG = config('DEBUG', default=False, cast=bool)
ALLOWED_HOSTS = config('ALLOWED_HOSTS', default='localhost,127.0.0.1', cast=Csv())

# -------------------------------
# Cookies & CSRF
# -------------------------------
SESSION_COOKIE_SECURE   = config('SESSION_COOKIE_SECURE', default=False, cast=bool) # Desenvolvido para HTTPS
SESSION_COOKIE_HTTPONLY = config('SESSION_COOKIE_HTTPONLY', default=True, cast=bool)
SESSION_COOKIE_SAMESITE = config('SESSION_COOKIE_SAMESITE', default='Lax')
CSRF_COOKIE_SECURE      = config('CSRF_COOKIE_SECURE', default=False, cast=bool) # Desenvolvido para HTTPS
CSRF_COOKIE_HTTPONLY    = config('CSRF_COOKIE_HTTPONLY', default=True, cast=bool)
CSRF_COOKIE_SAMESITE    = config('CSRF_COOKIE_SAMESITE', default='Lax')

SECURE_SSL_REDIRECT          = config('SECURE_SSL_REDIRECT', default=False, cast=bool)
SECURE_PROXY_SSL_HEADER      = ('HTTP_X_FORWARDED_PROTO', 'https')

# -------------------------------
# CORS
# -------------------------------
CORS_ALLOW_ALL_ORIGINS = config('CORS_ALLOW_ALL_ORIGINS', default=False, cast=bool)
CORS_ALLOW_CREDENTIALS = config('CORS_ALLOW_CREDENTIALS', default=True, cast=bool)
CSRF_TRUSTED_ORIGINS  = config('CSRF_TRUSTED_ORIGINS', default='http://localhost:5173', cast=Csv())
CORS_ALLOWED_ORIGINS   = config('CORS_ALLOWED_ORIGINS',   default='http://localhost:5173', cast=Csv())
CORS_ALLOW_METHODS     = config('CORS_ALLOW_METHODS',     default='GET,POST,PUT,PATCH,OPTIONS', cast=Csv())
CORS_ALLOW_HEADERS     = config('CORS_ALLOW_HEADERS',     default='Authorization,Content-Type,X-CSRFToken', cast=Csv())

# -------------------------------
# Order Bot
# -------------------------------
PUBLIC_BASE_URL        = config('PUBLIC_BASE_URL', default='http://localhost:5173').rstrip('/')
DASHBOARD_URL          = config('DASHBOARD_URL', default=f'{PUBLIC_BASE_URL}/dashboard/orders')
DEFAULT_LOCALE         = config('DEFAULT_LOCALE', default='en')
DEFAULT_PHONE_REGION   = config('DEFAULT_PHONE_REGION', default='DZ')
ORDER_BOT_QUEUE_BACKEND = config('ORDER_BOT_QUEUE_BACKEND', default='celery')  # celery | memory

# Política fixa de retentativa por canal (não configurável por cliente)
NOTIFICATION_MAX_ATTEMPTS      = config('NOTIFICATION_MAX_ATTEMPTS', default=3, cast=int)
NOTIFICATION_BACKOFF_SECONDS   = config('NOTIFICATION_BACKOFF_SECONDS', default=60, cast=int)
NOTIFICATION_SEND_TIMEOUT      = config('NOTIFICATION_SEND_TIMEOUT', default=10, cast=float)

# Varredura de pedidos sem notificação
ORDER_MONITOR_INTERVAL_SECONDS = config('ORDER_MONITOR_INTERVAL_SECONDS', default=30, cast=int)
ORDER_MONITOR_STALE_MINUTES    = config('ORDER_MONITOR_STALE_MINUTES', default=15, cast=int)
ORDER_MONITOR_BATCH_SIZE       = config('ORDER_MONITOR_BATCH_SIZE', default=100, cast=int)
ORDER_MONITOR_MAX_REDRIVES     = config('ORDER_MONITOR_MAX_REDRIVES', default=3, cast=int)
ORDER_MONITOR_MAX_AGE_HOURS    = config('ORDER_MONITOR_MAX_AGE_HOURS', default=48, cast=int)

# -------------------------------
# Celery
# -------------------------------
CELERY_BROKER_URL                 = config('CELERY_BROKER_URL', default='redis://localhost:6379/1')
CELERY_RESULT_BACKEND             = config('CELERY_RESULT_BACKEND', default='redis://localhost:6379/2')
CELERY_TASK_ACKS_LATE             = True
CELERY_TASK_REJECT_ON_WORKER_LOST = True
CELERY_WORKER_PREFETCH_MULTIPLIER = 1
CELERY_TASK_ALWAYS_EAGER          = config('CELERY_TASK_ALWAYS_EAGER', default=False, cast=bool)
CELERY_ACCEPT_CONTENT             = ["json"]
CELERY_TASK_SERIALIZER            = "json"
CELERY_TASK_SOFT_TIME_LIMIT       = config('CELERY_TASK_SOFT_TIME_LIMIT', default=30, cast=int)
CELERY_TASK_TIME_LIMIT            = config('CELERY_TASK_TIME_LIMIT', default=60, cast=int)
CELERY_TASK_QUEUES = {
    "default":  {"exchange": "default",  "routing_key": "default"},
    "whatsapp": {"exchange": "whatsapp", "routing_key": "whatsapp"},
    "sms":      {"exchange": "sms",      "routing_key": "sms"},
    "monitor":  {"exchange": "monitor",  "routing_key": "monitor"},
    "email":    {"exchange": "email",    "routing_key": "email"},
}
CELERY_TASK_DEFAULT_QUEUE = 'default'
CELERY_TASK_DEFAULT_EXCHANGE = 'default'
CELERY_TASK_DEFAULT_ROUTING_KEY = 'default'

# --- AGENDADOR (CELERY BEAT) ---
CELERY_BEAT_SCHEDULER = 'django_celery_beat.schedulers:DatabaseScheduler'

CELERY_BEAT_SCHEDULE = {
    # Reprocessa pedidos pendentes cujo envio nunca foi agendado (ou se perdeu).
    'sweep-unsent-orders': {
        'task': 'order_bot_api.tasks.sweep_unsent_orders',
        'schedule': float(ORDER_MONITOR_INTERVAL_SECONDS),
    },
}

# -------------------------------
# Redis
# -------------------------------
REDIS_URL = config('REDIS_URL', default='redis://localhost:6379/0')

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.redis.RedisCache",
        "LOCATION": REDIS_URL,
    },
}

# -------------------------------
# WhatsApp (gateway da sessão WhatsApp Web)
# -------------------------------
WHATSAPP_GATEWAY_URL     = config('WHATSAPP_GATEWAY_URL', default='http://localhost:3001')
WHATSAPP_GATEWAY_API_KEY = config('WHATSAPP_GATEWAY_API_KEY', default='')
WHATSAPP_SESSION         = config('WHATSAPP_SESSION', default='order-bot')

# -------------------------------
# Twilio SMS
# -------------------------------
TWILIO_ACCOUNT_SID = config('TWILIO_ACCOUNT_SID', default='')
TWILIO_AUTH_TOKEN  = config('TWILIO_AUTH_TOKEN', default='')
TWILIO_SMS_FROM    = config('TWILIO_SMS_FROM', default='')

# -------------------------------
# Brevo (e-mail para o cliente)
# -------------------------------
BREVO_API_KEY      = config('BREVO_API_KEY', default='')
DEFAULT_FROM_EMAIL = config('DEFAULT_FROM_EMAIL', default='no-reply@order-bot.local')

# -------------------------------
# Channels / Redis
# -------------------------------
CHANNEL_LAYERS = {
    "default": {
        "BACKEND": "channels_redis.core.RedisChannelLayer",
        "CONFIG": {"hosts": [REDIS_URL]},
    },
}

# -------------------------------
# Apps, Middleware, URLs
# -------------------------------
INSTALLED_APPS = [
    'corsheaders',
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'rest_framework',
    'drf_yasg',
    'django_prometheus',
    'channels',
    'django_extensions',
    'django_celery_beat',
    'order_bot_api.apps.OrderBotConfig',
    'plugins.django_interface.apps.DjangoInterfaceConfig',
]

MIDDLEWARE = [
    'django_prometheus.middleware.PrometheusBeforeMiddleware',
    'corsheaders.middleware.CorsMiddleware',
    'whitenoise.middleware.WhiteNoiseMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'plugins.django_interface.request_middleware.RequestContextMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django_prometheus.middleware.PrometheusAfterMiddleware',
]

ROOT_URLCONF = 'order_bot_api.urls'
WSGI_APPLICATION = 'order_bot_api.wsgi.application'
ASGI_APPLICATION = 'order_bot_api.asgi.application'

# -------------------------------
# Templates
# -------------------------------
TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [BASE_DIR / 'templates'],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

# -------------------------------
# REST Framework
# -------------------------------
# Autenticação do dashboard fica a cargo do gateway externo.
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": (),
    "DEFAULT_PERMISSION_CLASSES": (
        "rest_framework.permissions.AllowAny",
    ),
    "UNAUTHENTICATED_USER": None,
}
SWAGGER_SETTINGS = {
    'SECURITY_DEFINITIONS': {},
}

# -------------------------------
# Banco de Dados
# -------------------------------
if config('DB_NAME', default=''):
    DATABASES = {
        'default': {
            'ENGINE':   'django.db.backends.postgresql',
            'NAME':     config('DB_NAME'),
            'USER':     config('DB_USER', default='postgres'),
            'PASSWORD': config('DB_PASS', default=''),
            'HOST':     config('DB_HOST', default='localhost'),
            'PORT':     config('DB_PORT', default='5432'),
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME':   BASE_DIR / 'db.sqlite3',
        }
    }

# -------------------------------
# Internacionalização
# -------------------------------
LANGUAGE_CODE = 'en-us'
TIME_ZONE     = config('TIME_ZONE', default='Africa/Algiers')
USE_I18N      = True
USE_TZ        = True

# -------------------------------
# Arquivos estáticos
# -------------------------------
STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'
STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage"},
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'
