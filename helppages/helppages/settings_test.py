"""
Test settings - pytest / manage.py test
"""
from .settings import *  # noqa: F401,F403

DEBUG = False
ALLOWED_HOSTS = ['*']
SECRET_KEY = 'test-secret-key-not-for-production'

HELPPAGES_BASE_DOMAIN = 'helppages.ai'
PLATFORM_DOMAINS = ['helppages.ai', 'www.helppages.ai']

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'helppages-tests',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

CELERY_BROKER_URL = 'memory://'
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True

SIGNUP_DEFAULT_ROLE = 'viewer'

LOGGING['root']['level'] = 'WARNING'  # noqa: F405
LOGGING['loggers']['request_metrics']['level'] = 'WARNING'  # noqa: F405
