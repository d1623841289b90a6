"""
manage.py autosave_page: файл → страница через Autosaver.
"""
import os
import tempfile
from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import CommandError, call_command
from django.test import TestCase

from documentation.models import Doc
from pages.models import Page

User = get_user_model()


class AutosavePageCommandTests(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.user = User.objects.create_user('anna@example.com', 'secret123', username='anna')
        doc = Doc.objects.create(user=cls.user, title='Guide', slug='guide')
        cls.page = Page.objects.create(doc=doc, user=cls.user, title='Intro', slug='intro', content='old')

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.path = os.path.join(self.tmp.name, 'intro.md')

    def write(self, text):
        with open(self.path, 'w', encoding='utf-8') as f:
            f.write(text)

    def run_command(self, *args, **options):
        out = StringIO()
        options.setdefault('user', 'anna')
        call_command(
            'autosave_page', str(self.page.pk), self.path,
            delay=60, interval=0, max_polls=1, stdout=out, **options
        )
        return out.getvalue()

    def test_file_content_saved_on_exit(self):
        self.write('# Intro\n\nnew text')
        output = self.run_command()

        self.page.refresh_from_db()
        self.assertEqual(self.page.content, '# Intro\n\nnew text')
        self.assertEqual(self.page.last_edited_by, 'anna')
        self.assertIn('Autosave stopped', output)
        self.assertEqual(self.page.revisions.get().change_log, 'Autosave')

    def test_unchanged_file_not_saved(self):
        self.write('old')
        output = self.run_command(user='ANNA@example.com')
        self.assertNotIn('Saved', output)
        self.assertFalse(self.page.revisions.exists())

    def test_missing_inputs(self):
        self.write('x')
        with self.assertRaisesMessage(CommandError, 'User ghost not found'):
            self.run_command(user='ghost')

        with self.assertRaises(CommandError):
            call_command('autosave_page', 'not-a-uuid', self.path, user='anna')

        with self.assertRaisesMessage(CommandError, 'does not exist'):
            call_command('autosave_page', str(self.page.pk), self.path + '.missing', user='anna')
