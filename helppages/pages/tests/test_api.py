"""
API страниц кабинета: /api/pages/

Что проверяется:
  1. Список страниц документации (doc_id обязателен, фильтры)
  2. Создание — всегда черновик, slug уникален в документации
  3. Обновление и автосейв: когда появляется ревизия
  4. История версий и восстановление
  5. Удаление — только владелец документации или admin
  6. Публичный список, сгруппированный по разделам
"""
import uuid
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from accounts import roles
from documentation.models import Doc, DocItem, NavHeader
from pages.models import Page, PageRevision

User = get_user_model()


class PageApiTestCase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.owner = User.objects.create_user('owner@example.com', 'secret123', username='owner', role=roles.VIEWER)
        cls.author = User.objects.create_user('author@example.com', 'secret123', username='author', role=roles.VIEWER)
        cls.stranger = User.objects.create_user('stranger@example.com', 'secret123', username='stranger', role=roles.VIEWER)
        cls.editor = User.objects.create_user('editor@example.com', 'secret123', username='editor', role=roles.EDITOR)
        cls.doc = Doc.objects.create(user=cls.owner, title='Guide', slug='guide', is_public=True)
        cls.section = NavHeader.objects.create(doc=cls.doc, label='Basics', slug='basics')

    def setUp(self):
        self.client = APIClient()
        self.page = Page.objects.create(
            doc=self.doc, user=self.author, title='Intro', slug='intro', content='a' * 100,
        )

    def url(self, page=None, suffix=''):
        page = page or self.page
        return f'/api/pages/{page.pk}/{suffix}'


class PageListCreateTests(PageApiTestCase):

    def test_list_requires_doc_id(self):
        self.client.force_authenticate(self.owner)
        resp = self.client.get('/api/pages/')
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data['error'], 'doc_id is required')

    def test_list_forbidden_for_stranger(self):
        self.client.force_authenticate(self.stranger)
        resp = self.client.get('/api/pages/', {'doc_id': str(self.doc.pk)})
        self.assertEqual(resp.status_code, 403)

    def test_list_filters(self):
        Page.objects.create(
            doc=self.doc, user=self.owner, nav_header=self.section,
            title='Setup', slug='setup', status=Page.Status.PUBLISHED,
        )
        self.client.force_authenticate(self.owner)

        resp = self.client.get('/api/pages/', {'doc_id': str(self.doc.pk)})
        self.assertEqual(len(resp.data), 2)

        resp = self.client.get('/api/pages/', {'doc_id': str(self.doc.pk), 'status': 'published'})
        self.assertEqual([p['slug'] for p in resp.data], ['setup'])

        resp = self.client.get('/api/pages/', {'doc_id': str(self.doc.pk), 'nav_header_id': str(self.section.pk)})
        self.assertEqual([p['slug'] for p in resp.data], ['setup'])

    def test_create_is_always_draft(self):
        self.client.force_authenticate(self.owner)
        resp = self.client.post('/api/pages/', {
            'doc_id': str(self.doc.pk),
            'title': 'Quick Start',
            'content': '# Hi',
            'status': 'published',
            'nav_header_id': str(self.section.pk),
        }, format='json')
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data['slug'], 'quick-start')
        self.assertEqual(resp.data['status'], 'draft')
        self.assertEqual(resp.data['nav_header']['label'], 'Basics')

        page = Page.objects.get(pk=resp.data['id'])
        self.assertEqual(page.search_index, 'quick start # hi')
        self.assertEqual(page.last_edited_by, 'owner')

    def test_create_requires_title_and_doc(self):
        self.client.force_authenticate(self.owner)
        resp = self.client.post('/api/pages/', {'title': 'No doc'}, format='json')
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data['error'], 'title and doc_id are required')

    def test_create_duplicate_slug(self):
        self.client.force_authenticate(self.owner)
        resp = self.client.post('/api/pages/', {'doc_id': str(self.doc.pk), 'title': 'Intro'}, format='json')
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data['error'], 'A page with this slug already exists in this documentation')

    def test_create_in_foreign_doc(self):
        self.client.force_authenticate(self.stranger)
        resp = self.client.post('/api/pages/', {'doc_id': str(self.doc.pk), 'title': 'Spam'}, format='json')
        self.assertEqual(resp.status_code, 403)

    def test_create_in_missing_doc(self):
        self.client.force_authenticate(self.owner)
        resp = self.client.post('/api/pages/', {'doc_id': str(uuid.uuid4()), 'title': 'Lost'}, format='json')
        self.assertEqual(resp.status_code, 404)


class PageRetrieveUpdateTests(PageApiTestCase):

    def test_retrieve_draft(self):
        self.client.force_authenticate(self.stranger)
        self.assertEqual(self.client.get(self.url()).status_code, 403)

        self.client.force_authenticate(self.author)
        resp = self.client.get(self.url())
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['content'], 'a' * 100)

    def test_retrieve_invalid_id(self):
        self.client.force_authenticate(self.owner)
        self.assertEqual(self.client.get('/api/pages/not-a-uuid/').status_code, 404)

    def test_update_creates_revision_of_previous_state(self):
        self.client.force_authenticate(self.author)
        resp = self.client.patch(self.url(), {'content': 'b' * 101}, format='json')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['content'], 'b' * 101)

        revision = PageRevision.objects.get(page=self.page)
        self.assertEqual(revision.snapshot['content'], 'a' * 100)
        self.assertEqual(revision.user, self.author)

    def test_autosave_small_change_has_no_revision(self):
        self.client.force_authenticate(self.author)
        resp = self.client.patch(self.url(), {'content': 'a' * 105}, format='json', HTTP_X_AUTOSAVE='true')
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(PageRevision.objects.exists())

    def test_autosave_large_change(self):
        self.client.force_authenticate(self.author)
        self.client.patch(self.url(), {'content': 'a' * 300, 'is_autosave': True}, format='json')
        revision = PageRevision.objects.get(page=self.page)
        self.assertEqual(revision.change_log, 'Autosave')

    def test_empty_update(self):
        self.client.force_authenticate(self.author)
        resp = self.client.patch(self.url(), {}, format='json')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['error'], 'No fields provided for update')
        self.assertEqual(resp.data['page']['slug'], 'intro')

    def test_publish_sets_published_at(self):
        self.client.force_authenticate(self.owner)
        resp = self.client.patch(self.url(), {'status': 'published'}, format='json')
        self.assertEqual(resp.data['status'], 'published')
        self.assertIsNotNone(resp.data['published_at'])

    def test_invalid_status_falls_back_to_draft(self):
        self.client.force_authenticate(self.owner)
        resp = self.client.patch(self.url(), {'status': 'archived'}, format='json')
        self.assertEqual(resp.data['status'], 'draft')

    def test_status_is_case_insensitive(self):
        self.page.status = Page.Status.PUBLISHED
        self.page.save()
        self.client.force_authenticate(self.owner)
        resp = self.client.patch(self.url(), {'status': ' Published '}, format='json')
        self.assertEqual(resp.data['status'], 'published')
        self.page.refresh_from_db()
        self.assertEqual(self.page.status, Page.Status.PUBLISHED)

    def test_description_maps_to_summary(self):
        self.client.force_authenticate(self.author)
        resp = self.client.patch(self.url(), {'description': 'Short intro'}, format='json')
        self.assertEqual(resp.data['summary'], 'Short intro')

    def test_summary_wins_over_description(self):
        self.client.force_authenticate(self.author)
        resp = self.client.patch(
            self.url(), {'summary': 'From summary', 'description': 'From description'}, format='json',
        )
        self.assertEqual(resp.data['summary'], 'From summary')

    def test_empty_summary_becomes_null(self):
        self.page.summary = 'Old summary'
        self.page.save()
        self.client.force_authenticate(self.author)
        self.client.patch(self.url(), {'summary': ''}, format='json')
        self.page.refresh_from_db()
        self.assertIsNone(self.page.summary)

    def test_is_public_ignored(self):
        self.client.force_authenticate(self.author)
        with self.assertLogs('pages.services', level='WARNING') as logs:
            resp = self.client.patch(self.url(), {'title': 'Intro 2', 'is_public': False}, format='json')
        self.assertEqual(resp.status_code, 200)
        self.assertIn('is_public ignored', logs.output[0])
        self.doc.refresh_from_db()
        self.assertTrue(self.doc.is_public)
        self.assertNotIn('is_public', resp.data)

    def test_autosave_body_flag_small_change(self):
        self.client.force_authenticate(self.author)
        resp = self.client.patch(self.url(), {'content': 'a' * 105, 'is_autosave': True}, format='json')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['content'], 'a' * 105)
        self.assertFalse(PageRevision.objects.exists())

    def test_empty_autosave_touches_updated_at(self):
        before = timezone.now() - timedelta(hours=1)
        Page.objects.filter(pk=self.page.pk).update(updated_at=before)
        self.client.force_authenticate(self.author)
        resp = self.client.patch(self.url(), {}, format='json', HTTP_X_AUTOSAVE='true')
        self.assertEqual(resp.status_code, 200)
        self.assertNotIn('error', resp.data)
        self.page.refresh_from_db()
        self.assertGreater(self.page.updated_at, before)
        self.assertFalse(PageRevision.objects.exists())

    def test_position_string_coerced(self):
        self.client.force_authenticate(self.author)
        resp = self.client.patch(self.url(), {'position': '7'}, format='json')
        self.assertEqual(resp.data['position'], 7)
        self.page.refresh_from_db()
        self.assertEqual(self.page.position, 7)

    def test_slug_checked_in_new_doc_item(self):
        item = DocItem.objects.create(nav_header=self.section, label='v2', slug='v2')
        Page.objects.create(doc=self.doc, doc_item=item, user=self.author, title='Setup', slug='setup')
        self.client.force_authenticate(self.author)
        resp = self.client.patch(
            self.url(), {'slug': 'setup', 'doc_item_id': str(item.pk)}, format='json',
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data['slug'], ['A page with this slug already exists in this documentation'])

    def test_moving_into_doc_item_with_same_slug(self):
        item = DocItem.objects.create(nav_header=self.section, label='v2', slug='v2')
        Page.objects.create(doc=self.doc, doc_item=item, user=self.author, title='Intro', slug='intro')
        self.client.force_authenticate(self.author)
        resp = self.client.patch(self.url(), {'doc_item_id': str(item.pk)}, format='json')
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data['error'], 'A page with this slug already exists in this documentation')

    def test_update_by_stranger(self):
        self.client.force_authenticate(self.stranger)
        resp = self.client.patch(self.url(), {'title': 'Mine'}, format='json')
        self.assertEqual(resp.status_code, 403)

    def test_page_cannot_be_its_own_parent(self):
        self.client.force_authenticate(self.author)
        resp = self.client.patch(self.url(), {'parent_id': str(self.page.pk)}, format='json')
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data['error'], 'A page cannot be its own parent')


class RevisionTests(PageApiTestCase):

    def test_history_visible_to_author_and_collaborators(self):
        self.client.force_authenticate(self.author)
        self.client.patch(self.url(), {'content': 'v2'}, format='json')

        resp = self.client.get(self.url(suffix='revisions/'))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(len(resp.data), 1)
        self.assertEqual(resp.data[0]['user']['username'], 'author')

        self.client.force_authenticate(self.editor)
        self.assertEqual(self.client.get(self.url(suffix='revisions/')).status_code, 200)

        self.client.force_authenticate(self.stranger)
        self.assertEqual(self.client.get(self.url(suffix='revisions/')).status_code, 403)

    def test_restore(self):
        self.client.force_authenticate(self.author)
        self.client.patch(self.url(), {'content': 'v2'}, format='json')
        revision = PageRevision.objects.get(page=self.page)

        resp = self.client.post(self.url(suffix='restore/'), {'revision_id': str(revision.pk)}, format='json')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data['message'], 'Page restored successfully')
        self.assertEqual(resp.data['page']['content'], 'a' * 100)

        change_logs = list(PageRevision.objects.filter(page=self.page).values_list('change_log', flat=True))
        self.assertEqual(len(change_logs), 3)
        self.assertIn('Backup before restore', change_logs)
        self.assertTrue(any(log and log.startswith('Restored from version ') for log in change_logs))

    def test_restore_errors(self):
        self.client.force_authenticate(self.author)
        resp = self.client.post(self.url(suffix='restore/'), {}, format='json')
        self.assertEqual(resp.status_code, 400)

        resp = self.client.post(self.url(suffix='restore/'), {'revision_id': 'garbage'}, format='json')
        self.assertEqual(resp.status_code, 404)

        self.client.force_authenticate(self.stranger)
        resp = self.client.post(self.url(suffix='restore/'), {'revision_id': str(uuid.uuid4())}, format='json')
        self.assertEqual(resp.status_code, 403)


class PageDeleteAndPublicTests(PageApiTestCase):

    def test_delete_by_author_forbidden(self):
        self.client.force_authenticate(self.author)
        resp = self.client.delete(self.url())
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.data['error'], 'Forbidden: Only doc owner or admin can delete pages')

    def test_delete_by_doc_owner(self):
        self.client.force_authenticate(self.owner)
        resp = self.client.delete(self.url())
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(Page.objects.filter(pk=self.page.pk).exists())

    def test_public_grouped_by_section(self):
        Page.objects.create(
            doc=self.doc, user=self.owner, title='Root', slug='root', status=Page.Status.PUBLISHED,
        )
        Page.objects.create(
            doc=self.doc, user=self.owner, nav_header=self.section,
            title='Setup', slug='setup', status=Page.Status.PUBLISHED,
        )
        hidden = Doc.objects.create(user=self.owner, title='Hidden', slug='hidden', is_public=False)
        Page.objects.create(doc=hidden, user=self.owner, title='Secret', slug='secret', status=Page.Status.PUBLISHED)

        resp = self.client.get('/api/pages/public/')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(set(resp.data), {'none', str(self.section.pk)})
        self.assertIsNone(resp.data['none']['header'])
        self.assertEqual([p['slug'] for p in resp.data['none']['pages']], ['root'])
        self.assertEqual(resp.data[str(self.section.pk)]['header']['label'], 'Basics')
