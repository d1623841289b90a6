"""
Prometheus Metrics Endpoint для Django.
Экспортирует метрики в формате Prometheus для Grafana.

    path('metrics/', metrics_view, name='prometheus-metrics'),

Метрики:
- HTTP request count by status code (пишет RequestMetricsMiddleware)
- Request latency
- Пользователи, документации, опубликованные страницы, просмотры
- Соединение с БД и кешем
"""
import threading

from django.http import HttpResponse
from django.core.cache import cache
from django.contrib.auth import get_user_model
from django.conf import settings


class MetricsRegistry:
    """In-memory хранилище метрик процесса (singleton)."""

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance.counters = {}
            cls._instance.histograms = {}
            cls._instance.gauges = {}
        return cls._instance

    def inc_counter(self, name, labels=None, value=1):
        key = self._make_key(name, labels)
        with self._lock:
            self.counters[key] = self.counters.get(key, 0) + value

    def set_gauge(self, name, value, labels=None):
        key = self._make_key(name, labels)
        self.gauges[key] = value

    def observe_histogram(self, name, value, labels=None):
        key = self._make_key(name, labels)
        with self._lock:
            values = self.histograms.setdefault(key, [])
            values.append(value)
            # Храним только последние 1000 наблюдений
            if len(values) > 1000:
                self.histograms[key] = values[-1000:]

    def reset(self):
        with self._lock:
            self.counters.clear()
            self.histograms.clear()
            self.gauges.clear()

    def _make_key(self, name, labels):
        if labels:
            label_str = ','.join(f'{k}="{v}"' for k, v in sorted(labels.items()))
            return f'{name}{{{label_str}}}'
        return name

    def format_prometheus(self):
        """Форматирует метрики в формате Prometheus."""
        lines = []

        for key, value in self.counters.items():
            lines.append(f'{key} {value}')

        for key, value in self.gauges.items():
            lines.append(f'{key} {value}')

        # Гистограммы упрощённо: count / sum / avg
        for key, values in self.histograms.items():
            if values:
                lines.append(f'{key}_count {len(values)}')
                lines.append(f'{key}_sum {sum(values)}')
                lines.append(f'{key}_avg {sum(values)/len(values):.4f}')

        return '\n'.join(lines)


metrics = MetricsRegistry()


def collect_system_metrics():
    """Собирает gauge-метрики по БД на момент запроса."""
    from documentation.models import Doc
    from pages.models import Page
    from analytics.models import PageView

    User = get_user_model()

    try:
        metrics.set_gauge('helppages_users_total', User.objects.count())
        metrics.set_gauge('helppages_docs_total', Doc.objects.count())
        metrics.set_gauge(
            'helppages_pages_published_total',
            Page.objects.filter(status=Page.Status.PUBLISHED).count(),
        )
        metrics.set_gauge('helppages_page_views_total', PageView.objects.count())
        metrics.set_gauge('db_connection_healthy', 1)
    except Exception:
        metrics.set_gauge('db_connection_healthy', 0)

    try:
        cache.set('_metrics_test', '1', 10)
        metrics.set_gauge('cache_connection_healthy', 1 if cache.get('_metrics_test') == '1' else 0)
    except Exception:
        metrics.set_gauge('cache_connection_healthy', 0)


def metrics_view(request):
    """
    Prometheus metrics endpoint.
    GET /metrics/

    Доступ: IP из PROMETHEUS_ALLOWED_IPS или ?token=PROMETHEUS_TOKEN.
    """
    allowed_ips = getattr(settings, 'PROMETHEUS_ALLOWED_IPS', ['127.0.0.1', '::1'])
    client_ip = request.META.get('HTTP_X_FORWARDED_FOR', request.META.get('REMOTE_ADDR', ''))
    client_ip = client_ip.split(',')[0].strip()

    if client_ip not in allowed_ips:
        token = request.GET.get('token', '')
        expected_token = getattr(settings, 'PROMETHEUS_TOKEN', '')
        if not expected_token or token != expected_token:
            return HttpResponse('Forbidden', status=403)

    collect_system_metrics()

    metrics.set_gauge('up', 1)
    metrics.set_gauge('app_info', 1, {'version': getattr(settings, 'APP_VERSION', '1.0.0')})

    return HttpResponse(metrics.format_prometheus(), content_type='text/plain; charset=utf-8')
