"""
Аналитика: поиск, отзывы, просмотры страниц и чистка ревизий.

Что проверяется:
  1. Подсветка совпадений и выдержки вокруг них (HTML экранируется)
  2. Поиск видит только опубликованное в публичных документациях,
     include_private добавляет свои страницы
  3. На субдомене поиск ограничен документациями владельца
  4. Отзывы и трекинг просмотров (Celery в eager-режиме)
  5. prune_page_revisions оставляет PAGE_REVISIONS_KEEP ревизий
"""
import uuid
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.db import DataError
from django.test import SimpleTestCase, TestCase, override_settings
from rest_framework.test import APIClient

from documentation.models import Doc, NavHeader
from pages.models import Page, PageRevision
from tenants.middleware import SubdomainMiddleware

from .models import PageFeedback, PageView, SearchQuery
from .search import highlight_text, highlighted_excerpt
from .tasks import prune_page_revisions, record_page_view

User = get_user_model()


class HighlightTests(SimpleTestCase):

    def test_highlight_escapes_html(self):
        self.assertEqual(highlight_text('a <b> Test', 'test'), 'a &lt;b&gt; <mark>Test</mark>')
        self.assertEqual(highlight_text('', 'x'), '')

    def test_query_with_regex_chars(self):
        self.assertEqual(highlight_text('cost (USD)', '(usd)'), 'cost <mark>(USD)</mark>')

    def test_query_does_not_match_inside_entities(self):
        self.assertEqual(highlight_text('Tom & Jerry', 'amp'), 'Tom &amp; Jerry')
        self.assertEqual(highlight_text('a < b', 'lt'), 'a &lt; b')
        self.assertEqual(
            highlighted_excerpt('say "quote" now', 'quot'),
            'say &quot;<mark>quot</mark>e&quot; now',
        )

    def test_query_with_html_chars(self):
        self.assertEqual(highlight_text('Tom & Jerry', '&'), 'Tom <mark>&amp;</mark> Jerry')

    def test_excerpt_window(self):
        content = 'x' * 200 + 'needle' + 'y' * 200
        excerpt = highlighted_excerpt(content, 'needle')
        self.assertEqual(excerpt, '...' + 'x' * 75 + '<mark>needle</mark>' + 'y' * 75 + '...')

    def test_excerpt_without_match(self):
        self.assertEqual(highlighted_excerpt('abc' * 100, 'zzz'), 'abc' * 50 + '...')
        self.assertEqual(highlighted_excerpt('short', 'zzz'), 'short')

    def test_excerpt_at_start(self):
        self.assertEqual(highlighted_excerpt('needle in text', 'needle'), '<mark>needle</mark> in text')


class SearchViewTests(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.anna = User.objects.create_user('anna@example.com', 'secret123', username='anna')
        cls.bob = User.objects.create_user('bob@example.com', 'secret123', username='bob')

        anna_doc = Doc.objects.create(user=cls.anna, title='Anna', slug='anna-docs', is_public=True)
        private_doc = Doc.objects.create(user=cls.anna, title='Private', slug='anna-private', is_public=False)
        bob_doc = Doc.objects.create(user=cls.bob, title='Bob', slug='bob-docs', is_public=True)

        cls.section = NavHeader.objects.create(doc=anna_doc, label='Install guides', slug='install-guides')
        cls.published = Page.objects.create(
            doc=anna_doc, user=cls.anna, nav_header=cls.section,
            title='Installation', slug='installation', content='How to install the agent',
            status=Page.Status.PUBLISHED,
        )
        Page.objects.create(
            doc=anna_doc, user=cls.anna, title='Install draft', slug='install-draft',
        )
        Page.objects.create(
            doc=private_doc, user=cls.anna, title='Install internal', slug='install-internal',
            status=Page.Status.PUBLISHED,
        )
        Page.objects.create(
            doc=bob_doc, user=cls.bob, title='Bob install', slug='bob-install',
            status=Page.Status.PUBLISHED,
        )

    def setUp(self):
        self.client = APIClient()
        SubdomainMiddleware.clear_cache()

    def page_slugs(self, resp):
        return sorted(r['slug'] for r in resp.data['results'] if r['type'] == 'page')

    def test_empty_query(self):
        resp = self.client.get('/api/search/', {'q': '  '})
        self.assertEqual(resp.data, {'results': [], 'query': ''})

    def test_anonymous_sees_published_public_pages(self):
        resp = self.client.get('/api/search/', {'q': 'install'}, HTTP_HOST='helppages.ai')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.page_slugs(resp), ['bob-install', 'installation'])
        self.assertEqual(resp.data['total_count'], len(resp.data['results']))

    def test_sections_come_first(self):
        resp = self.client.get('/api/search/', {'q': 'install'}, HTTP_HOST='helppages.ai')
        first = resp.data['results'][0]
        self.assertEqual(first['type'], 'category')
        self.assertEqual(first['title'], '<mark>Install</mark> guides')
        self.assertEqual(first['url'], f'/cms/pages?header={self.section.pk}')

    def test_page_result_shape(self):
        resp = self.client.get('/api/search/', {'q': 'installation'}, HTTP_HOST='helppages.ai')
        result = resp.data['results'][0]
        self.assertEqual(result['title'], '<mark>Installation</mark>')
        self.assertEqual(result['category'], 'Install guides')
        self.assertEqual(result['url'], '/u/anna/installation')
        self.assertTrue(result['is_public'])

    def test_include_private_adds_own_pages(self):
        self.client.force_authenticate(self.anna)
        resp = self.client.get('/api/search/', {'q': 'install', 'include_private': 'true'}, HTTP_HOST='helppages.ai')
        self.assertEqual(
            self.page_slugs(resp),
            ['bob-install', 'install-draft', 'install-internal', 'installation'],
        )

    def test_include_private_ignored_for_anonymous(self):
        resp = self.client.get('/api/search/', {'q': 'install', 'include_private': 'true'}, HTTP_HOST='helppages.ai')
        self.assertEqual(self.page_slugs(resp), ['bob-install', 'installation'])

    def test_subdomain_scopes_results(self):
        resp = self.client.get('/api/search/', {'q': 'install'}, HTTP_HOST='bob.helppages.ai')
        self.assertEqual(self.page_slugs(resp), ['bob-install'])
        self.assertFalse([r for r in resp.data['results'] if r['type'] == 'category'])

    def test_limit(self):
        resp = self.client.get('/api/search/', {'q': 'install', 'limit': 1}, HTTP_HOST='helppages.ai')
        self.assertEqual(len(self.page_slugs(resp)), 1)

        resp = self.client.get('/api/search/', {'q': 'install', 'limit': 'many'}, HTTP_HOST='helppages.ai')
        self.assertEqual(resp.status_code, 400)

    def test_authenticated_search_is_logged(self):
        self.client.force_authenticate(self.bob)
        self.client.get('/api/search/', {'q': 'install'}, HTTP_HOST='helppages.ai')
        logged = SearchQuery.objects.get(user=self.bob)
        self.assertEqual(logged.query, 'install')
        self.assertEqual(logged.results_count, 3)

    def test_anonymous_search_not_logged(self):
        self.client.get('/api/search/', {'q': 'install'}, HTTP_HOST='helppages.ai')
        self.assertFalse(SearchQuery.objects.exists())


class FeedbackAndTrackingTests(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.user = User.objects.create_user('anna@example.com', 'secret123', username='anna')
        doc = Doc.objects.create(user=cls.user, title='Guide', slug='guide')
        cls.page = Page.objects.create(
            doc=doc, user=cls.user, title='Intro', slug='intro', status=Page.Status.PUBLISHED,
        )

    def setUp(self):
        self.client = APIClient()

    def test_feedback_saved(self):
        resp = self.client.post('/api/feedback/', {
            'page_id': str(self.page.pk), 'helpful': False, 'comment': 'Missing example',
        }, format='json')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data, {'success': True})

        feedback = PageFeedback.objects.get(page=self.page)
        self.assertFalse(feedback.is_helpful)
        self.assertEqual(feedback.comment, 'Missing example')
        self.assertIsNone(feedback.user)

    def test_feedback_validation(self):
        resp = self.client.post('/api/feedback/', {'page_id': str(self.page.pk), 'helpful': 'yes'}, format='json')
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data['error'], 'page_id and helpful are required')

        resp = self.client.post('/api/feedback/', {'page_id': str(uuid.uuid4()), 'helpful': True}, format='json')
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.data['error'], 'Page not found')

    def test_track_pageview(self):
        self.client.force_authenticate(self.user)
        resp = self.client.post(
            '/api/analytics/track/',
            {'page_id': str(self.page.pk), 'event_type': 'pageview'},
            format='json',
            HTTP_X_FORWARDED_FOR='203.0.113.7, 10.0.0.1',
            HTTP_USER_AGENT='pytest',
        )
        self.assertEqual(resp.status_code, 200)

        self.page.refresh_from_db()
        self.assertEqual(self.page.view_count, 1)
        view = PageView.objects.get(page=self.page)
        self.assertEqual(view.ip_address, '203.0.113.7')
        self.assertEqual(view.user_agent, 'pytest')
        self.assertEqual(view.user, self.user)

    def test_track_other_events_ignored(self):
        resp = self.client.post('/api/analytics/track/', {'page_id': str(self.page.pk), 'event_type': 'scroll'}, format='json')
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(PageView.objects.exists())

    def test_track_validation(self):
        resp = self.client.post('/api/analytics/track/', {}, format='json')
        self.assertEqual(resp.data['error'], 'Missing page_id')
        resp = self.client.post('/api/analytics/track/', {'page_id': '42'}, format='json')
        self.assertEqual(resp.data['error'], 'Invalid page_id')

    def test_track_forged_forwarded_for(self):
        resp = self.client.post(
            '/api/analytics/track/',
            {'page_id': str(self.page.pk), 'event_type': 'pageview'},
            format='json',
            HTTP_X_FORWARDED_FOR='not-an-ip',
            REMOTE_ADDR='192.0.2.10',
        )
        self.assertEqual(resp.status_code, 200)
        view = PageView.objects.get(page=self.page)
        self.assertEqual(view.ip_address, '192.0.2.10')

    def test_failed_view_insert_keeps_counter(self):
        with patch.object(PageView.objects, 'create', side_effect=DataError('invalid input for type inet')):
            with self.assertRaises(DataError):
                record_page_view(str(self.page.pk), ip_address='203.0.113.7')
        self.page.refresh_from_db()
        self.assertEqual(self.page.view_count, 0)

    def test_record_missing_page(self):
        self.assertEqual(record_page_view(str(uuid.uuid4())), {'recorded': False})


class PruneRevisionsTests(TestCase):

    @override_settings(PAGE_REVISIONS_KEEP=2)
    def test_keeps_latest_revisions_per_page(self):
        user = User.objects.create_user('anna@example.com', 'secret123', username='anna')
        doc = Doc.objects.create(user=user, title='Guide', slug='guide')
        busy = Page.objects.create(doc=doc, user=user, title='Busy', slug='busy')
        quiet = Page.objects.create(doc=doc, user=user, title='Quiet', slug='quiet')
        for index in range(4):
            PageRevision.objects.create(page=busy, snapshot={'content': str(index)})
        PageRevision.objects.create(page=quiet, snapshot={'content': 'only'})

        result = prune_page_revisions()

        self.assertEqual(result['pages'], 1)
        self.assertEqual(result['deleted'], 2)
        self.assertEqual(busy.revisions.count(), 2)
        self.assertEqual(quiet.revisions.count(), 1)
