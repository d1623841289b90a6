"""
Публичный сайт: субдомены пользователей, /u/ и /docs/.

Что проверяется:
  1. Основной домен отдаёт JSON сервиса
  2. anna.helppages.ai → индекс документаций Анны, приватный профиль → 403
  3. /docs/<slug>/ редиректит на первую опубликованную страницу
  4. Страница рендерится с оглавлением, черновики не видны
  5. Чужая документация на субдомене — 404
"""
from django.contrib.auth import get_user_model
from django.test import TestCase

from documentation.models import Doc
from pages.models import Page
from tenants.middleware import SubdomainMiddleware

User = get_user_model()


class PublicSiteTests(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.anna = User.objects.create_user('anna@example.com', 'secret123', username='anna', full_name='Anna K')
        cls.bob = User.objects.create_user('bob@example.com', 'secret123', username='bob')
        cls.doc = Doc.objects.create(user=cls.anna, title='Anna Guide', slug='anna-guide', is_public=True)
        cls.hidden = Doc.objects.create(user=cls.anna, title='Hidden', slug='hidden', is_public=False)
        cls.bob_doc = Doc.objects.create(user=cls.bob, title='Bob Guide', slug='bob-guide', is_public=True)

        cls.intro = Page.objects.create(
            doc=cls.doc, user=cls.anna, title='Intro', slug='intro', position=0,
            content='# Welcome\n\n## Install\n\ntext', status=Page.Status.PUBLISHED,
        )
        Page.objects.create(
            doc=cls.doc, user=cls.anna, parent=cls.intro, title='Child', slug='child',
            summary='Nested page', status=Page.Status.PUBLISHED,
        )
        Page.objects.create(doc=cls.doc, user=cls.anna, title='Secret draft', slug='secret-draft')

    def setUp(self):
        SubdomainMiddleware.clear_cache()

    def test_main_domain_home(self):
        resp = self.client.get('/', HTTP_HOST='helppages.ai')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()['service'], 'helppages')

    def test_subdomain_home_lists_public_docs(self):
        resp = self.client.get('/', HTTP_HOST='anna.helppages.ai')
        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, 'Anna Guide')
        self.assertNotContains(resp, 'Hidden')

    def test_unknown_subdomain(self):
        resp = self.client.get('/', HTTP_HOST='ghost.helppages.ai')
        self.assertEqual(resp.status_code, 404)

    def test_private_user(self):
        User.objects.filter(pk=self.anna.pk).update(is_public=False)
        resp = self.client.get('/', HTTP_HOST='anna.helppages.ai')
        self.assertEqual(resp.status_code, 403)
        self.assertContains(resp, 'Private Documentation', status_code=403)

        resp = self.client.get('/u/anna/', HTTP_HOST='helppages.ai')
        self.assertEqual(resp.status_code, 403)

    def test_user_docs_by_handle(self):
        resp = self.client.get('/u/@Anna/', HTTP_HOST='helppages.ai')
        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, 'Anna K')
        self.assertEqual(self.client.get('/u/nobody/', HTTP_HOST='helppages.ai').status_code, 404)

    def test_user_page(self):
        resp = self.client.get('/u/anna/child/', HTTP_HOST='helppages.ai')
        self.assertEqual(resp.status_code, 200)
        labels = [crumb['label'] for crumb in resp.context['breadcrumbs']]
        self.assertEqual(labels, ['Anna K', 'Intro', 'Child'])

    def test_user_page_draft_hidden(self):
        resp = self.client.get('/u/anna/secret-draft/', HTTP_HOST='helppages.ai')
        self.assertEqual(resp.status_code, 404)

    def test_doc_redirects_to_first_page(self):
        resp = self.client.get('/docs/anna-guide/', HTTP_HOST='helppages.ai')
        self.assertRedirects(resp, '/docs/anna-guide/intro/', fetch_redirect_response=False)

    def test_doc_without_pages(self):
        resp = self.client.get('/docs/bob-guide/', HTTP_HOST='helppages.ai')
        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, 'No pages published yet.')

    def test_doc_page_renders_toc_and_children(self):
        resp = self.client.get('/docs/anna-guide/intro/', HTTP_HOST='helppages.ai')
        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, '<h2 id="install">Install</h2>', html=False)
        self.assertContains(resp, 'On this page')
        self.assertContains(resp, '/docs/anna-guide/child/')
        self.assertNotContains(resp, 'Secret draft')
        self.assertFalse(resp.context['can_edit'])

    def test_doc_page_edit_link_for_owner(self):
        self.client.force_login(self.anna)
        resp = self.client.get('/docs/anna-guide/intro/', HTTP_HOST='helppages.ai')
        self.assertTrue(resp.context['can_edit'])
        self.assertContains(resp, 'Edit this page')

    def test_private_doc_is_404(self):
        resp = self.client.get('/docs/hidden/', HTTP_HOST='helppages.ai')
        self.assertEqual(resp.status_code, 404)

    def test_foreign_doc_on_subdomain(self):
        resp = self.client.get('/docs/bob-guide/', HTTP_HOST='anna.helppages.ai')
        self.assertEqual(resp.status_code, 404)
