"""
Инфраструктура проекта: health-check, /metrics/, логирование,
Sentry-фильтр, обработчик ошибок API и точки входа WSGI.
"""
import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import IntegrityError
from django.test import SimpleTestCase, TestCase, override_settings
from django.utils.module_loading import import_string
from rest_framework.exceptions import NotFound, ValidationError

from .exceptions import api_exception_handler
from .prometheus_metrics import MetricsRegistry, metrics
from .safe_logging import PageContentFilter
from .sentry_config import before_send_callback

User = get_user_model()


class HealthCheckTests(TestCase):

    def test_health(self):
        resp = self.client.get('/api/health/')
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data['status'], 'healthy')
        self.assertEqual(data['checks'], {'database': 'ok', 'settings': 'ok'})

    def test_ready(self):
        self.assertEqual(self.client.get('/api/health/ready/').json(), {'ready': True})

    def test_db_health(self):
        User.objects.create_user('anna@example.com', 'secret123', username='anna')
        data = self.client.get('/api/health/db/').json()
        self.assertEqual(data['status'], 'ok')
        self.assertEqual(data['user_count'], 1)
        self.assertEqual(data['engine'], 'sqlite')


@override_settings(PROMETHEUS_ALLOWED_IPS=['10.1.1.1'], PROMETHEUS_TOKEN='scrape-me')
class MetricsViewTests(TestCase):

    def test_forbidden_without_token(self):
        resp = self.client.get('/metrics/')
        self.assertEqual(resp.status_code, 403)

    def test_token_access(self):
        resp = self.client.get('/metrics/', {'token': 'scrape-me'})
        self.assertEqual(resp.status_code, 200)
        body = resp.content.decode()
        self.assertIn('helppages_users_total 0', body)
        self.assertIn('up 1', body)

    def test_allowed_ip(self):
        resp = self.client.get('/metrics/', HTTP_X_FORWARDED_FOR='10.1.1.1')
        self.assertEqual(resp.status_code, 200)


class MetricsRegistryTests(SimpleTestCase):

    def setUp(self):
        metrics.reset()

    def test_singleton(self):
        self.assertIs(MetricsRegistry(), metrics)

    def test_prometheus_format(self):
        metrics.inc_counter('requests', {'status': 200, 'method': 'GET'})
        metrics.inc_counter('requests', {'status': 200, 'method': 'GET'})
        metrics.observe_histogram('latency', 0.5)
        metrics.observe_histogram('latency', 1.5)
        text = metrics.format_prometheus()
        self.assertIn('requests{method="GET",status="200"} 2', text)
        self.assertIn('latency_count 2', text)
        self.assertIn('latency_avg 1.0000', text)


class PageContentFilterTests(SimpleTestCase):

    def make_record(self, args):
        return logging.LogRecord('pages', logging.INFO, __file__, 1, 'Saving %s: %s', args, None)

    def test_long_args_shortened(self):
        record = self.make_record(('page-1', 'x' * 1000))
        self.assertTrue(PageContentFilter(max_length=100).filter(record))
        self.assertEqual(record.getMessage(), 'Saving page-1: [1000 chars]')

    def test_short_args_untouched(self):
        record = self.make_record(('page-1', 'short'))
        PageContentFilter().filter(record)
        self.assertEqual(record.getMessage(), 'Saving page-1: short')


class SentryBeforeSendTests(SimpleTestCase):

    def test_not_found_dropped(self):
        hint = {'exc_info': (NotFound, NotFound(), None)}
        self.assertIsNone(before_send_callback({}, hint))

    def test_sensitive_data_masked(self):
        event = {'request': {
            'data': {'email': 'a@b.c', 'password': 'hunter2'},
            'headers': {'X-API-Key': 'hp_live_abc', 'Accept': 'application/json'},
        }}
        result = before_send_callback(event, {})
        self.assertEqual(result['request']['data'], {'email': 'a@b.c', 'password': '[FILTERED]'})
        self.assertEqual(result['request']['headers']['X-API-Key'], '[FILTERED]')
        self.assertEqual(result['request']['headers']['Accept'], 'application/json')


class ExceptionHandlerTests(SimpleTestCase):

    def test_error_key_is_string(self):
        resp = api_exception_handler(ValidationError({'error': 'Missing page_id'}), {})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data['error'], 'Missing page_id')

    def test_field_errors_keep_detail(self):
        resp = api_exception_handler(ValidationError({'slug': ['Slug must be lowercase']}), {})
        self.assertEqual(resp.data['error'], 'Slug must be lowercase')
        self.assertEqual(resp.data['slug'], ['Slug must be lowercase'])

    def test_list_errors_wrapped(self):
        resp = api_exception_handler(ValidationError(['Bad payload']), {})
        self.assertEqual(resp.data, {'error': 'Bad payload', 'detail': ['Bad payload']})

    def test_integrity_error(self):
        resp = api_exception_handler(IntegrityError('UNIQUE constraint failed'), {'view': object()})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data['error'], 'A record with these unique fields already exists')


class EntryPointTests(SimpleTestCase):

    def test_application_paths_importable(self):
        for name in ('WSGI_APPLICATION', 'ASGI_APPLICATION'):
            path = getattr(settings, name, None)
            if path:
                self.assertTrue(callable(import_string(path)), name)
