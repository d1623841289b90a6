"""
core: middleware метрик запросов и демо-данные.
"""
from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import RequestFactory, SimpleTestCase, TestCase

from documentation.models import Doc
from helppages.prometheus_metrics import metrics
from pages.models import Page

from .middleware import get_client_ip

User = get_user_model()


class ClientIpTests(SimpleTestCase):

    def setUp(self):
        self.factory = RequestFactory()

    def test_forwarded_for_first_hop(self):
        request = self.factory.get('/', HTTP_X_FORWARDED_FOR='203.0.113.7, 10.0.0.1')
        self.assertEqual(get_client_ip(request), '203.0.113.7')

    def test_real_ip(self):
        request = self.factory.get('/', HTTP_X_REAL_IP=' 198.51.100.2 ')
        self.assertEqual(get_client_ip(request), '198.51.100.2')

    def test_remote_addr(self):
        request = self.factory.get('/', REMOTE_ADDR='192.0.2.1')
        self.assertEqual(get_client_ip(request), '192.0.2.1')

    def test_invalid_forwarded_for_skipped(self):
        request = self.factory.get('/', HTTP_X_FORWARDED_FOR='not-an-ip, 10.0.0.1', REMOTE_ADDR='192.0.2.1')
        self.assertEqual(get_client_ip(request), '192.0.2.1')

    def test_invalid_real_ip_skipped(self):
        request = self.factory.get('/', HTTP_X_REAL_IP='<script>', REMOTE_ADDR='192.0.2.1')
        self.assertEqual(get_client_ip(request), '192.0.2.1')

    def test_no_valid_address(self):
        request = self.factory.get('/', REMOTE_ADDR='')
        self.assertIsNone(get_client_ip(request))


class RequestMetricsMiddlewareTests(TestCase):

    def setUp(self):
        metrics.reset()

    def test_duration_header_and_counter(self):
        resp = self.client.get('/api/health/')
        self.assertEqual(resp.status_code, 200)
        self.assertIn('X-Request-Duration', resp)
        self.assertEqual(metrics.counters['helppages_http_requests_total{method="GET",status="200"}'], 1)
        self.assertEqual(len(metrics.histograms['helppages_http_request_duration_seconds{method="GET"}']), 1)

    def test_status_label_per_response(self):
        self.client.get('/api/docs/')
        self.assertEqual(metrics.counters['helppages_http_requests_total{method="GET",status="401"}'], 1)


class SeedDemoCommandTests(TestCase):

    def test_seed_is_repeatable(self):
        out = StringIO()
        call_command('seed_demo', stdout=out)
        call_command('seed_demo', password='other-pass', stdout=out)

        self.assertEqual(User.objects.filter(username__startswith='demo-').count(), 2)
        self.assertEqual(Doc.objects.filter(slug__startswith='demo-').count(), 2)
        self.assertEqual(Page.objects.filter(status=Page.Status.PUBLISHED).count(), 5)
        self.assertIn('Demo data ready: 2 users, 2 docs, 5 pages', out.getvalue())

        admin = User.objects.get(username='demo-admin')
        self.assertEqual(admin.role, 'admin')
        self.assertTrue(admin.check_password('other-pass'))

    def test_pages_are_searchable(self):
        call_command('seed_demo', stdout=StringIO())
        page = Page.objects.get(slug='authentication')
        self.assertIn('x-api-key', page.search_index)
