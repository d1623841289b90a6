"""
Экспорт страницы: /api/export/?format=markdown|html|pdf&page_id=
"""
import uuid

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from documentation.models import Doc, NavHeader
from pages.export import export_markdown
from pages.models import Page

User = get_user_model()

EXPORT_URL = '/api/export/'


class ExportTests(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.owner = User.objects.create_user('anna@example.com', 'secret123', username='anna', full_name='Anna K')
        cls.stranger = User.objects.create_user('bob@example.com', 'secret123', username='bob')
        cls.doc = Doc.objects.create(user=cls.owner, title='Guide', slug='guide', is_public=True)
        section = NavHeader.objects.create(doc=cls.doc, label='Basics', slug='basics')
        cls.page = Page.objects.create(
            doc=cls.doc, user=cls.owner, nav_header=section,
            title='Say "Hi"', slug='say-hi', summary='Greeting guide',
            content='# Hello\n\n<b>raw</b>', status=Page.Status.PUBLISHED,
            published_at=timezone.now(),
        )
        cls.draft = Page.objects.create(doc=cls.doc, user=cls.owner, title='Draft', slug='draft')

    def setUp(self):
        self.client = APIClient()

    def test_markdown_front_matter(self):
        text = export_markdown(self.page)
        self.assertTrue(text.startswith('---\ntitle: "Say \\"Hi\\""\nauthor: "Anna K"\ncategory: "Basics"\n'))
        self.assertIn('status: published\n---\n\n# Say "Hi"\n\n> Greeting guide\n', text)
        self.assertIn('*Exported from HelpPages on ', text)

    def test_markdown_without_section(self):
        text = export_markdown(self.draft)
        self.assertIn('\ncategory: "Uncategorized"\n', text)
        self.assertIn('\nstatus: draft\n', text)

    def test_markdown_is_default_format(self):
        resp = self.client.get(EXPORT_URL, {'page_id': str(self.page.pk)})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp['Content-Type'], 'text/markdown; charset=utf-8')
        self.assertEqual(resp['Content-Disposition'], 'attachment; filename="say-hi.md"')

    def test_html_export_escapes_content(self):
        resp = self.client.get(EXPORT_URL, {'page_id': str(self.page.pk), 'format': 'html'})
        self.assertEqual(resp.status_code, 200)
        body = resp.content.decode()
        self.assertIn('<h1 id="hello">Hello</h1>', body)
        self.assertIn('&lt;b&gt;raw&lt;/b&gt;', body)
        self.assertEqual(resp['Content-Disposition'], 'attachment; filename="say-hi.html"')

    def test_pdf_not_implemented(self):
        resp = self.client.get(EXPORT_URL, {'page_id': str(self.page.pk), 'format': 'pdf'})
        self.assertEqual(resp.status_code, 501)

    def test_invalid_format(self):
        resp = self.client.get(EXPORT_URL, {'page_id': str(self.page.pk), 'format': 'docx'})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data['error'], 'Invalid format. Use markdown, html or pdf')

    def test_page_id_required_and_checked(self):
        self.assertEqual(self.client.get(EXPORT_URL).status_code, 400)
        self.assertEqual(self.client.get(EXPORT_URL, {'page_id': 'bad'}).status_code, 404)
        self.assertEqual(self.client.get(EXPORT_URL, {'page_id': str(uuid.uuid4())}).status_code, 404)

    def test_draft_export_rules(self):
        params = {'page_id': str(self.draft.pk)}
        self.assertEqual(self.client.get(EXPORT_URL, params).status_code, 401)

        self.client.force_authenticate(self.stranger)
        self.assertEqual(self.client.get(EXPORT_URL, params).status_code, 403)

        self.client.force_authenticate(self.owner)
        self.assertEqual(self.client.get(EXPORT_URL, params).status_code, 200)
