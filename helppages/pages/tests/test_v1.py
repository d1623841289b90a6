"""
Внешний API /api/v1/pages/ с ключом X-API-Key.

Что проверяется:
  1. Без учётных данных и с неизвестным ключом — 401
  2. Список своих страниц с пагинацией limit / offset
  3. Создание: viewer — 403, обязательные поля, 409 на дубль slug
  4. PATCH всегда снимает ревизию
  5. DELETE — только admin
"""
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from accounts import roles
from accounts.models import ApiKey
from documentation.models import Doc
from pages.models import Page, PageRevision

User = get_user_model()

LIST_URL = '/api/v1/pages/'


class ExternalApiTestCase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.editor = User.objects.create_user('editor@example.com', 'secret123', username='editor', role=roles.EDITOR)
        cls.viewer = User.objects.create_user('viewer@example.com', 'secret123', username='viewer', role=roles.VIEWER)
        cls.admin = User.objects.create_user('admin@example.com', 'secret123', username='admin', role=roles.ADMIN)
        cls.editor_key = ApiKey.objects.create(user=cls.editor, name='ci')
        cls.viewer_key = ApiKey.objects.create(user=cls.viewer, name='ci')
        cls.admin_key = ApiKey.objects.create(user=cls.admin, name='ci')
        cls.doc = Doc.objects.create(user=cls.editor, title='Guide', slug='guide', is_public=True)

    def setUp(self):
        self.client = APIClient()

    def use_key(self, api_key):
        self.client.credentials(HTTP_X_API_KEY=api_key.key)

    def detail_url(self, page):
        return f'{LIST_URL}{page.pk}/'

    def make_page(self, slug, user=None, **extra):
        return Page.objects.create(doc=self.doc, user=user or self.editor, title=slug.title(), slug=slug, **extra)


class AuthenticationTests(ExternalApiTestCase):

    def test_no_credentials(self):
        resp = self.client.get(LIST_URL)
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp['WWW-Authenticate'], 'X-API-Key')

    def test_unknown_key(self):
        self.client.credentials(HTTP_X_API_KEY='hp_live_unknown')
        resp = self.client.get(LIST_URL)
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.data['error'], 'Invalid API key')

    def test_expired_key(self):
        expired = ApiKey.objects.create(
            user=self.editor, name='old', expires_at=timezone.now() - timedelta(days=1),
        )
        self.use_key(expired)
        self.assertEqual(self.client.get(LIST_URL).status_code, 401)

    def test_last_used_is_recorded(self):
        self.use_key(self.editor_key)
        self.client.get(LIST_URL)
        self.editor_key.refresh_from_db()
        self.assertIsNotNone(self.editor_key.last_used_at)

    def test_jwt_session_user_also_accepted(self):
        self.client.force_authenticate(self.editor)
        self.assertEqual(self.client.get(LIST_URL).status_code, 200)


class ListTests(ExternalApiTestCase):

    def test_only_own_pages_with_pagination(self):
        for index in range(3):
            self.make_page(f'page-{index}')
        self.make_page('foreign', user=self.admin)

        self.use_key(self.editor_key)
        resp = self.client.get(LIST_URL, {'limit': 2})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(len(resp.data['pages']), 2)
        self.assertEqual(resp.data['pagination'], {'total': 3, 'limit': 2, 'offset': 0, 'has_more': True})

        resp = self.client.get(LIST_URL, {'limit': 2, 'offset': 2})
        self.assertEqual(len(resp.data['pages']), 1)
        self.assertFalse(resp.data['pagination']['has_more'])

    def test_filters(self):
        self.make_page('draft')
        self.make_page('live', status=Page.Status.PUBLISHED)
        self.use_key(self.editor_key)

        resp = self.client.get(LIST_URL, {'status': 'published'})
        self.assertEqual([p['slug'] for p in resp.data['pages']], ['live'])
        self.assertTrue(resp.data['pages'][0]['is_public'])

        resp = self.client.get(LIST_URL, {'is_public': 'false'})
        self.assertEqual(resp.data['pages'], [])

    def test_invalid_limit(self):
        self.use_key(self.editor_key)
        resp = self.client.get(LIST_URL, {'limit': 'ten'})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data['error'], 'limit must be an integer')


class CreateTests(ExternalApiTestCase):

    def payload(self, **overrides):
        data = {
            'doc_id': str(self.doc.pk),
            'title': 'Webhooks',
            'slug': 'webhooks',
            'content': '# Webhooks',
            'status': 'published',
        }
        data.update(overrides)
        return data

    def test_create_published(self):
        self.use_key(self.editor_key)
        resp = self.client.post(LIST_URL, self.payload(), format='json')
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data['message'], 'Page created successfully')
        self.assertEqual(resp.data['page']['status'], 'published')
        self.assertIsNotNone(resp.data['page']['published_at'])

    def test_viewer_cannot_create(self):
        self.use_key(self.viewer_key)
        resp = self.client.post(LIST_URL, self.payload(), format='json')
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.data['error'], 'Forbidden: Viewers cannot create pages')

    def test_required_fields(self):
        self.use_key(self.editor_key)
        resp = self.client.post(LIST_URL, self.payload(content=''), format='json')
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data['error'], 'Missing required fields: title, slug, content')

        resp = self.client.post(LIST_URL, self.payload(doc_id=''), format='json')
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data['error'], 'Missing required field: doc_id')

    def test_duplicate_slug_conflict(self):
        self.make_page('webhooks')
        self.use_key(self.editor_key)
        resp = self.client.post(LIST_URL, self.payload(), format='json')
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.data['error'], 'A page with this slug already exists in this documentation')

    def test_unknown_doc(self):
        self.use_key(self.editor_key)
        resp = self.client.post(LIST_URL, self.payload(doc_id='missing'), format='json')
        self.assertEqual(resp.status_code, 404)


class DetailTests(ExternalApiTestCase):

    def test_get_with_revisions(self):
        page = self.make_page('intro', status=Page.Status.PUBLISHED)
        PageRevision.objects.create(page=page, user=self.editor, snapshot={'title': 'Old'})
        self.use_key(self.viewer_key)
        resp = self.client.get(self.detail_url(page))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['page']['user']['username'], 'editor')
        self.assertEqual(len(resp.data['page']['revisions']), 1)

    def test_draft_hidden_from_viewer(self):
        page = self.make_page('draft')
        self.use_key(self.viewer_key)
        resp = self.client.get(self.detail_url(page))
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.data['error'], 'Forbidden: Cannot access this page')

    def test_missing_page(self):
        self.use_key(self.editor_key)
        self.assertEqual(self.client.get(f'{LIST_URL}nope/').status_code, 404)

    def test_patch_always_snapshots(self):
        page = self.make_page('intro')
        self.use_key(self.editor_key)
        resp = self.client.patch(self.detail_url(page), {'summary': 'Short intro'}, format='json')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['message'], 'Page updated successfully')
        self.assertEqual(resp.data['page']['summary'], 'Short intro')

        revision = PageRevision.objects.get(page=page)
        self.assertEqual(revision.change_log, 'API update')
        self.assertIsNone(revision.snapshot['summary'])

    def test_viewer_cannot_patch_own_page(self):
        page = self.make_page('mine', user=self.viewer)
        self.use_key(self.viewer_key)
        resp = self.client.patch(self.detail_url(page), {'title': 'Changed'}, format='json')
        self.assertEqual(resp.status_code, 403)

    def test_delete_admin_only(self):
        page = self.make_page('intro')
        self.use_key(self.editor_key)
        resp = self.client.delete(self.detail_url(page))
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.data['error'], 'Forbidden: Only admins can delete pages')

        self.use_key(self.admin_key)
        resp = self.client.delete(self.detail_url(page))
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(Page.objects.filter(pk=page.pk).exists())
