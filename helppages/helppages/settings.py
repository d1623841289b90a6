"""
Django settings for the HelpPages project.

Все значения читаются из переменных окружения, дефолты рассчитаны
на локальный запуск (SQLite, локальный кеш, Celery в eager-режиме).
Окружения переопределяются в settings_dev.py / settings_test.py.
"""

import os
from datetime import timedelta
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_bool(name, default=False):
    return os.environ.get(name, str(default)).lower() in ('true', '1', 'yes')


SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-insecure-helppages-secret-key-change-me')
DEBUG = _env_bool('DEBUG', False)
VERSION = os.environ.get('APP_VERSION', '1.0.0')
APP_VERSION = VERSION

# ============================================================
# Домены и субдомены
# ============================================================
HELPPAGES_BASE_DOMAIN = os.environ.get('HELPPAGES_BASE_DOMAIN', 'helppages.ai').lower()
PLATFORM_DOMAINS = [HELPPAGES_BASE_DOMAIN, f'www.{HELPPAGES_BASE_DOMAIN}']

# Первые метки хоста, которые не считаются субдоменом пользователя
SUBDOMAIN_IGNORED_LABELS = ('www', 'api')

# Только с этих хостов принимается заголовок X-Subdomain
SUBDOMAIN_DEV_HOSTS = {'localhost', '127.0.0.1', '0.0.0.0'}
SUBDOMAIN_CACHE_TTL = int(os.environ.get('SUBDOMAIN_CACHE_TTL', '300'))

ALLOWED_HOSTS = [
    h.strip() for h in os.environ.get(
        'ALLOWED_HOSTS', f'localhost,127.0.0.1,.{HELPPAGES_BASE_DOMAIN}'
    ).split(',') if h.strip()
]

# ============================================================
# Приложения
# ============================================================
INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'rest_framework',
    'rest_framework_simplejwt',
    'accounts',
    'tenants',
    'documentation',
    'pages',
    'analytics',
    'core',
]

MIDDLEWARE = [
    'core.middleware.RequestMetricsMiddleware',
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'tenants.middleware.SubdomainMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'helppages.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
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

WSGI_APPLICATION = 'helppages.wsgi.application'

# ============================================================
# База данных
# ============================================================
DB_ENGINE = os.environ.get('DB_ENGINE', 'sqlite3')
if DB_ENGINE == 'postgresql':
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.postgresql',
            'NAME': os.environ.get('DB_NAME', 'helppages'),
            'USER': os.environ.get('DB_USER', 'helppages'),
            'PASSWORD': os.environ.get('DB_PASSWORD', ''),
            'HOST': os.environ.get('DB_HOST', '127.0.0.1'),
            'PORT': os.environ.get('DB_PORT', '5432'),
            'CONN_MAX_AGE': int(os.environ.get('DB_CONN_MAX_AGE', '60')),
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': os.environ.get('DB_NAME', str(BASE_DIR / 'db.sqlite3')),
        }
    }

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# ============================================================
# Кеш: Redis в production, локальная память по умолчанию
# ============================================================
REDIS_URL = os.environ.get('REDIS_URL', '')
if REDIS_URL:
    CACHES = {
        'default': {
            'BACKEND': 'django_redis.cache.RedisCache',
            'LOCATION': REDIS_URL,
            'OPTIONS': {'CLIENT_CLASS': 'django_redis.client.DefaultClient'},
            'KEY_PREFIX': 'helppages',
        }
    }
else:
    CACHES = {
        'default': {
            'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
            'LOCATION': 'helppages-default',
        }
    }

# ============================================================
# Пользователи и аутентификация
# ============================================================
AUTH_USER_MODEL = 'accounts.User'

AUTH_PASSWORD_VALIDATORS = []

# Роль для новых регистраций (первый пользователь всегда admin)
SIGNUP_DEFAULT_ROLE = os.environ.get('SIGNUP_DEFAULT_ROLE', 'viewer')

# Одноразовый токен для перехода на субдомен после регистрации
AUTO_LOGIN_TOKEN_TTL = int(os.environ.get('AUTO_LOGIN_TOKEN_TTL', '300'))

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': (
        'rest_framework_simplejwt.authentication.JWTAuthentication',
        'rest_framework.authentication.SessionAuthentication',
    ),
    'DEFAULT_PERMISSION_CLASSES': (
        'rest_framework.permissions.IsAuthenticated',
    ),
    'EXCEPTION_HANDLER': 'helppages.exceptions.api_exception_handler',
    'UNAUTHENTICATED_USER': 'django.contrib.auth.models.AnonymousUser',
    # ?format= занят экспортом страниц
    'URL_FORMAT_OVERRIDE': None,
}

SIMPLE_JWT = {
    'ACCESS_TOKEN_LIFETIME': timedelta(minutes=int(os.environ.get('JWT_ACCESS_MINUTES', '60'))),
    'REFRESH_TOKEN_LIFETIME': timedelta(days=int(os.environ.get('JWT_REFRESH_DAYS', '7'))),
    'AUTH_HEADER_TYPES': ('Bearer',),
    'USER_ID_FIELD': 'id',
    'USER_ID_CLAIM': 'user_id',
}

# ============================================================
# Страницы и ревизии
# ============================================================
AUTOSAVE_REVISION_THRESHOLD_PERCENT = int(os.environ.get('AUTOSAVE_REVISION_THRESHOLD_PERCENT', '10'))
PAGE_REVISIONS_LIMIT = 50
PAGE_REVISIONS_KEEP = int(os.environ.get('PAGE_REVISIONS_KEEP', '200'))

# ============================================================
# Celery
# ============================================================
CELERY_BROKER_URL = os.environ.get('CELERY_BROKER_URL', REDIS_URL or 'memory://')
CELERY_RESULT_BACKEND = os.environ.get('CELERY_RESULT_BACKEND', None)
CELERY_TASK_ALWAYS_EAGER = CELERY_BROKER_URL == 'memory://'
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_TASK_SERIALIZER = 'json'
CELERY_ACCEPT_CONTENT = ['json']
CELERY_TIMEZONE = 'UTC'
CELERY_BEAT_SCHEDULE = {
    'prune-page-revisions': {
        'task': 'analytics.tasks.prune_page_revisions',
        'schedule': timedelta(hours=24),
    },
}

# ============================================================
# Локализация и статика
# ============================================================
LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'

# ============================================================
# Мониторинг
# ============================================================
PROMETHEUS_ALLOWED_IPS = ['127.0.0.1', '::1']
PROMETHEUS_TOKEN = os.environ.get('PROMETHEUS_TOKEN', '')

# ============================================================
# Логирование
# ============================================================
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {name} {process:d} {thread:d} {message}',
            'style': '{',
        },
        'simple': {
            'format': '{levelname} {name} {message}',
            'style': '{',
        },
    },
    'filters': {
        'page_content': {
            '()': 'helppages.safe_logging.PageContentFilter',
        },
    },
    'handlers': {
        'console': {
            'class': 'helppages.safe_logging.ThreadSafeStreamHandler',
            'formatter': 'verbose',
            'filters': ['page_content'],
        },
    },
    'root': {
        'handlers': ['console'],
        'level': LOG_LEVEL,
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': 'WARNING',
            'propagate': False,
        },
        'request_metrics': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False,
        },
    },
}

# Sentry подключаем в самом конце, когда все настройки известны
from .sentry_config import init_sentry  # noqa: E402

init_sentry()
