"""
Middleware для сбора метрик запросов и производительности
"""
import logging
import time

from django.core.exceptions import ValidationError
from django.core.validators import validate_ipv46_address
from django.utils.deprecation import MiddlewareMixin

from helppages.prometheus_metrics import metrics

logger = logging.getLogger('request_metrics')

SLOW_REQUEST_SECONDS = 2.0


def _valid_ip(value):
    try:
        validate_ipv46_address(value)
    except ValidationError:
        return None
    return value


def get_client_ip(request):
    """
    Реальный IP клиента (с учётом прокси).

    Заголовки прокси приходят от клиента, мусор в них пропускается.
    None, если валидного адреса нет.
    """
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = _valid_ip(x_forwarded_for.split(',')[0].strip())
        if ip:
            return ip
    x_real_ip = request.META.get('HTTP_X_REAL_IP')
    if x_real_ip:
        ip = _valid_ip(x_real_ip.strip())
        if ip:
            return ip
    return _valid_ip(request.META.get('REMOTE_ADDR', ''))


class RequestMetricsMiddleware(MiddlewareMixin):
    """
    Одна структурированная строка лога на запрос:
    метод, путь, статус, длительность, пользователь, IP.

    Плюс заголовок X-Request-Duration и счётчики для /metrics/.
    """

    def process_request(self, request):
        request._start_time = time.monotonic()
        return None

    def process_response(self, request, response):
        if not hasattr(request, '_start_time'):
            return response

        duration = time.monotonic() - request._start_time

        user_id = 'anonymous'
        user = getattr(request, 'user', None)
        if user is not None and user.is_authenticated:
            user_id = user.pk

        logger.info(
            'method=%s path=%s status=%s duration=%.3fs user=%s ip=%s',
            request.method, request.path, response.status_code, duration, user_id, get_client_ip(request),
        )
        response['X-Request-Duration'] = f'{duration:.3f}'

        metrics.inc_counter(
            'helppages_http_requests_total',
            {'method': request.method, 'status': response.status_code},
        )
        metrics.observe_histogram('helppages_http_request_duration_seconds', duration, {'method': request.method})

        if duration > SLOW_REQUEST_SECONDS:
            logger.warning(
                'SLOW_REQUEST: %s %s took %.3fs (user=%s)',
                request.method, request.path, duration, user_id,
            )
        return response
