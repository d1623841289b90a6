"""
Политика ревизий: когда сохранение страницы создаёт снимок.

Что проверяется:
  1. content_change_percent (в т.ч. пустой исходный контент)
  2. Обычное сохранение — ревизия при любом изменении title / content
  3. Автосейв — только при смене заголовка или изменении длины > порога
  4. snapshot_page хранит состояние ДО изменения
"""
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.test import SimpleTestCase, TestCase, override_settings

from documentation.models import Doc
from pages.models import Page
from pages.revisions import (
    build_search_index,
    content_change_percent,
    make_snapshot,
    should_snapshot,
    snapshot_page,
)

User = get_user_model()


class ContentChangePercentTests(SimpleTestCase):

    def test_empty_old_content(self):
        self.assertEqual(content_change_percent('', ''), 0.0)
        self.assertEqual(content_change_percent(None, 'abc'), 100.0)

    def test_relative_length_change(self):
        self.assertEqual(content_change_percent('a' * 100, 'a' * 105), 5.0)
        self.assertEqual(content_change_percent('a' * 100, 'a' * 50), 50.0)

    def test_same_length_is_zero(self):
        self.assertEqual(content_change_percent('abcd', 'dcba'), 0.0)

    def test_search_index(self):
        self.assertEqual(build_search_index('Intro', 'Hello World', None), 'intro hello world')


@override_settings(AUTOSAVE_REVISION_THRESHOLD_PERCENT=10)
class ShouldSnapshotTests(SimpleTestCase):

    def setUp(self):
        self.page = Page(title='Intro', content='a' * 100)

    def test_nothing_changed(self):
        self.assertFalse(should_snapshot(self.page, title='Intro', content='a' * 100))
        self.assertFalse(should_snapshot(self.page))

    def test_regular_save_snapshots_any_change(self):
        self.assertTrue(should_snapshot(self.page, content='a' * 101))
        self.assertTrue(should_snapshot(self.page, title='Intro 2'))

    def test_autosave_small_change_skipped(self):
        self.assertFalse(should_snapshot(self.page, content='a' * 105, is_autosave=True))
        self.assertFalse(should_snapshot(self.page, content='a' * 110, is_autosave=True))

    def test_autosave_large_change(self):
        self.assertTrue(should_snapshot(self.page, content='a' * 111, is_autosave=True))
        self.assertTrue(should_snapshot(self.page, content='a' * 80, is_autosave=True))

    def test_autosave_title_change(self):
        self.assertTrue(should_snapshot(self.page, title='Renamed', content='a' * 101, is_autosave=True))


class SnapshotPageTests(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.user = User.objects.create_user('anna@example.com', 'secret123', username='anna')
        doc = Doc.objects.create(user=cls.user, title='Guide', slug='guide')
        cls.page = Page.objects.create(doc=doc, user=cls.user, title='Intro', slug='intro', content='v1')

    def test_snapshot_keeps_current_state(self):
        revision = snapshot_page(self.page, self.user, change_log='Manual')
        self.assertEqual(revision.snapshot, make_snapshot(self.page))
        self.assertEqual(revision.snapshot['content'], 'v1')
        self.assertEqual(revision.user, self.user)
        self.assertEqual(revision.change_log, 'Manual')

    def test_anonymous_author_is_null(self):
        revision = snapshot_page(self.page, AnonymousUser())
        self.assertIsNone(revision.user)
