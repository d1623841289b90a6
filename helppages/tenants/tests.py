"""
Субдомены: разбор хоста, middleware, contextvars.

Что проверяется:
  1. anna.helppages.ai → subdomain='anna', tenant_user=anna
  2. Основной домен, www и api — без субдомена
  3. X-Subdomain header работает только на localhost
  4. Старые адреса /dashboard → /cms (301)
  5. Кеш пользователей сбрасывается при изменении User
"""
from unittest.mock import MagicMock

from django.contrib.auth import get_user_model
from django.test import RequestFactory, TestCase, override_settings

from tenants.context import (
    clear_current_tenant,
    get_current_subdomain,
    get_current_tenant_user,
    set_current_tenant,
)
from tenants.middleware import SubdomainMiddleware
from tenants.subdomains import extract_subdomain, is_main_domain, normalize_host, subdomain_url

User = get_user_model()


class SubdomainParsingTests(TestCase):

    def test_normalize_host(self):
        self.assertEqual(normalize_host('Anna.HelpPages.ai:8000'), 'anna.helppages.ai')
        self.assertEqual(normalize_host(None), '')

    def test_main_domain(self):
        self.assertTrue(is_main_domain('helppages.ai'))
        self.assertTrue(is_main_domain('www.helppages.ai'))
        self.assertTrue(is_main_domain('localhost'))
        self.assertFalse(is_main_domain('anna.helppages.ai'))

    def test_extract_subdomain(self):
        self.assertEqual(extract_subdomain('anna.helppages.ai'), 'anna')
        self.assertEqual(extract_subdomain('anna.helppages.ai:443'), 'anna')
        self.assertIsNone(extract_subdomain('helppages.ai'))
        self.assertIsNone(extract_subdomain('api.helppages.ai'))
        self.assertIsNone(extract_subdomain(''))

    @override_settings(DEBUG=False)
    def test_subdomain_url(self):
        self.assertEqual(subdomain_url('anna', 'docs/intro'), 'https://anna.helppages.ai/docs/intro')
        self.assertEqual(subdomain_url('anna'), 'https://anna.helppages.ai')

    @override_settings(DEBUG=True)
    def test_subdomain_url_debug_uses_http(self):
        self.assertTrue(subdomain_url('anna', '/').startswith('http://'))


class TenantContextTests(TestCase):

    def test_set_get_clear(self):
        user = MagicMock()
        set_current_tenant('anna', user)
        self.assertEqual(get_current_subdomain(), 'anna')
        self.assertIs(get_current_tenant_user(), user)
        clear_current_tenant()
        self.assertIsNone(get_current_subdomain())
        self.assertIsNone(get_current_tenant_user())


class SubdomainMiddlewareTests(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.anna = User.objects.create_user('anna@example.com', 'secret123', username='anna')

    def setUp(self):
        self.factory = RequestFactory()
        self.seen = {}
        self.middleware = SubdomainMiddleware(get_response=self._capture)
        SubdomainMiddleware.clear_cache()

    def _capture(self, request):
        self.seen['subdomain'] = request.subdomain
        self.seen['tenant_user'] = request.tenant_user
        self.seen['context_user'] = get_current_tenant_user()
        return MagicMock(status_code=200)

    def _call(self, host, path='/', **headers):
        request = self.factory.get(path, HTTP_HOST=host, **headers)
        return self.middleware(request)

    def test_user_subdomain(self):
        self._call('anna.helppages.ai')
        self.assertEqual(self.seen['subdomain'], 'anna')
        self.assertEqual(self.seen['tenant_user'], self.anna)
        self.assertEqual(self.seen['context_user'], self.anna)
        # После запроса контекст очищен
        self.assertIsNone(get_current_tenant_user())

    def test_unknown_subdomain_has_no_user(self):
        self._call('ghost.helppages.ai')
        self.assertEqual(self.seen['subdomain'], 'ghost')
        self.assertIsNone(self.seen['tenant_user'])

    def test_main_domain(self):
        self._call('helppages.ai')
        self.assertIsNone(self.seen['subdomain'])
        self.assertIsNone(self.seen['tenant_user'])

    def test_header_honoured_on_localhost(self):
        self._call('localhost:3000', HTTP_X_SUBDOMAIN='anna')
        self.assertEqual(self.seen['subdomain'], 'anna')
        self.assertEqual(self.seen['tenant_user'], self.anna)

    def test_header_ignored_on_production_host(self):
        with self.assertLogs('tenants.middleware', level='WARNING'):
            self._call('helppages.ai', HTTP_X_SUBDOMAIN='anna')
        self.assertIsNone(self.seen['subdomain'])

    def test_legacy_dashboard_redirect_keeps_path_and_query(self):
        response = self._call('helppages.ai', '/dashboard/pages/1?tab=history')
        self.assertEqual(response.status_code, 301)
        self.assertEqual(response['Location'], '/cms/pages/1?tab=history')

    def test_legacy_all_courses_redirect(self):
        response = self._call('helppages.ai', '/cms/all-courses')
        self.assertEqual(response.status_code, 301)
        self.assertEqual(response['Location'], '/cms')

    def test_no_redirect_on_user_subdomain(self):
        response = self._call('anna.helppages.ai', '/dashboard')
        self.assertEqual(response.status_code, 200)

    def test_cache_cleared_on_user_change(self):
        self._call('anna.helppages.ai')
        self.assertIn('anna', SubdomainMiddleware._user_cache)

        self.anna.full_name = 'Anna'
        self.anna.save()
        self.assertNotIn('anna', SubdomainMiddleware._user_cache)
