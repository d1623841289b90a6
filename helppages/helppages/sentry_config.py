"""
Sentry Integration для Django.
Отправляет ошибки в Sentry.

Настройка:
1. Добавить в окружение: SENTRY_DSN=https://xxx@xxx.ingest.sentry.io/xxx
2. init_sentry() вызывается в конце settings.py

Без SENTRY_DSN инициализация пропускается.
"""
import os
import logging

logger = logging.getLogger(__name__)

# Ключи тела запроса, которые никогда не уходят в Sentry
SENSITIVE_DATA_KEYS = ('password', 'token', 'secret', 'api_key', 'key', 'refresh', 'access')
SENSITIVE_HEADERS = ('Authorization', 'X-Api-Key', 'X-API-Key', 'Cookie')


def init_sentry():
    """
    Инициализирует Sentry SDK.
    Вызывать в конце settings.py.
    """
    sentry_dsn = os.environ.get('SENTRY_DSN', '')

    if not sentry_dsn:
        logger.debug("Sentry: DSN not configured, skipping initialization")
        return False

    import sentry_sdk
    from sentry_sdk.integrations.celery import CeleryIntegration
    from sentry_sdk.integrations.django import DjangoIntegration
    from sentry_sdk.integrations.logging import LoggingIntegration

    environment = os.environ.get('DJANGO_ENV', 'production')
    if os.environ.get('DEBUG', 'False').lower() in ('true', '1', 'yes'):
        environment = 'development'

    logging_integration = LoggingIntegration(
        level=logging.INFO,        # breadcrumbs
        event_level=logging.ERROR  # события
    )

    sentry_sdk.init(
        dsn=sentry_dsn,
        integrations=[
            DjangoIntegration(
                transaction_style='url',
                middleware_spans=True,
            ),
            CeleryIntegration(),
            logging_integration,
        ],
        environment=environment,
        release=os.environ.get('APP_VERSION', 'unknown'),
        traces_sample_rate=float(os.environ.get('SENTRY_TRACES_SAMPLE_RATE', '0.1')),
        send_default_pii=False,
        ignore_errors=[
            'django.security.DisallowedHost',
            'django.http.request.RawPostDataException',
        ],
        before_send=before_send_callback,
    )

    logger.info("Sentry: initialized for %s environment", environment)
    return True


def before_send_callback(event, hint):
    """
    Фильтрация событий перед отправкой в Sentry.

    404 и обрывы соединения отбрасываются, пароли, токены и
    API-ключи маскируются.
    """
    if 'exc_info' in hint:
        exc_type, exc_value, _ = hint['exc_info']

        if exc_type.__name__ in ('Http404', 'NotFound'):
            return None

        if 'ConnectionResetError' in str(exc_type):
            return None

    request_data = event.get('request')
    if request_data:
        data = request_data.get('data')
        if isinstance(data, dict):
            for key in SENSITIVE_DATA_KEYS:
                if key in data:
                    data[key] = '[FILTERED]'

        headers = request_data.get('headers')
        if isinstance(headers, dict):
            for header in SENSITIVE_HEADERS:
                if header in headers:
                    headers[header] = '[FILTERED]'

    return event
