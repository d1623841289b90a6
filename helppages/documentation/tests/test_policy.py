from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.test import TestCase

from accounts import roles
from documentation import policy
from documentation.models import Doc
from pages.models import Page

User = get_user_model()


class PolicyTests(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.owner = User.objects.create_user('owner@example.com', 'secret123', username='owner', role=roles.VIEWER)
        cls.author = User.objects.create_user('author@example.com', 'secret123', username='author', role=roles.VIEWER)
        cls.stranger = User.objects.create_user('stranger@example.com', 'secret123', username='stranger', role=roles.VIEWER)
        cls.editor = User.objects.create_user('editor@example.com', 'secret123', username='editor', role=roles.EDITOR)
        cls.admin = User.objects.create_user('admin@example.com', 'secret123', username='admin', role=roles.ADMIN)

        cls.doc = Doc.objects.create(user=cls.owner, title='Guide', slug='guide', is_public=True)
        cls.private_doc = Doc.objects.create(user=cls.owner, title='Internal', slug='internal', is_public=False)
        cls.draft = Page.objects.create(doc=cls.doc, user=cls.author, title='Draft', slug='draft')
        cls.published = Page.objects.create(
            doc=cls.doc, user=cls.author, title='Live', slug='live', status=Page.Status.PUBLISHED,
        )
        cls.private_published = Page.objects.create(
            doc=cls.private_doc, user=cls.owner, title='Secret', slug='secret', status=Page.Status.PUBLISHED,
        )

    def test_manage_doc(self):
        self.assertTrue(policy.can_manage_doc(self.owner, self.doc))
        self.assertTrue(policy.can_manage_doc(self.editor, self.doc))
        self.assertTrue(policy.can_manage_doc(self.admin, self.doc))
        self.assertFalse(policy.can_manage_doc(self.stranger, self.doc))
        self.assertFalse(policy.can_manage_doc(AnonymousUser(), self.doc))

    def test_delete_doc_excludes_editor(self):
        self.assertTrue(policy.can_delete_doc(self.owner, self.doc))
        self.assertTrue(policy.can_delete_doc(self.admin, self.doc))
        self.assertFalse(policy.can_delete_doc(self.editor, self.doc))

    def test_view_doc(self):
        self.assertTrue(policy.can_view_doc(AnonymousUser(), self.doc))
        self.assertFalse(policy.can_view_doc(AnonymousUser(), self.private_doc))
        self.assertTrue(policy.can_view_doc(self.owner, self.private_doc))

    def test_edit_page(self):
        self.assertTrue(policy.can_edit_page(self.author, self.draft))
        self.assertTrue(policy.can_edit_page(self.owner, self.draft))
        self.assertTrue(policy.can_edit_page(self.editor, self.draft))
        self.assertFalse(policy.can_edit_page(self.stranger, self.draft))
        self.assertFalse(policy.can_edit_page(AnonymousUser(), self.draft))

    def test_delete_page_needs_doc_owner_or_admin(self):
        self.assertTrue(policy.can_delete_page(self.owner, self.draft))
        self.assertTrue(policy.can_delete_page(self.admin, self.draft))
        self.assertFalse(policy.can_delete_page(self.author, self.draft))
        self.assertFalse(policy.can_delete_page(self.editor, self.draft))

    def test_view_page(self):
        self.assertTrue(policy.can_view_page(AnonymousUser(), self.published))
        self.assertFalse(policy.can_view_page(AnonymousUser(), self.draft))
        self.assertFalse(policy.can_view_page(self.stranger, self.private_published))
        self.assertTrue(policy.can_view_page(self.author, self.draft))

    def test_revisions_visible_to_author_and_collaborators(self):
        self.assertTrue(policy.can_view_revisions(self.author, self.draft))
        self.assertTrue(policy.can_view_revisions(self.editor, self.draft))
        self.assertFalse(policy.can_view_revisions(self.owner, self.draft))
        self.assertFalse(policy.can_view_revisions(AnonymousUser(), self.draft))
