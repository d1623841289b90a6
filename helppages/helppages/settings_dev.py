"""
Development settings - локальная разработка
"""
from .settings import *  # noqa: F401,F403

DEBUG = True
ALLOWED_HOSTS = ['*']

# В dev все регистрации получают роль editor
SIGNUP_DEFAULT_ROLE = 'editor'

EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'

CELERY_BROKER_URL = 'memory://'
CELERY_TASK_ALWAYS_EAGER = True

LOG_LEVEL = 'DEBUG'
LOGGING['root']['level'] = 'DEBUG'  # noqa: F405
