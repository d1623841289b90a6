from django.test import SimpleTestCase
from rest_framework.exceptions import ValidationError

from documentation.slugs import generate_slug, get_slug_error_message, is_valid_slug, normalize_slug


class GenerateSlugTests(SimpleTestCase):

    def test_basic(self):
        self.assertEqual(generate_slug('Getting Started'), 'getting-started')

    def test_strips_punctuation_and_underscores(self):
        self.assertEqual(generate_slug('  Getting Started_Guide! '), 'getting-started-guide')
        self.assertEqual(generate_slug('API -- v2'), 'api-v2')

    def test_non_ascii_is_dropped(self):
        self.assertEqual(generate_slug('Привет world'), 'world')
        self.assertEqual(generate_slug('🚀'), '')

    def test_empty(self):
        self.assertEqual(generate_slug(None), '')


class SlugValidationTests(SimpleTestCase):

    def test_valid(self):
        for slug in ('intro', 'getting-started', 'v2-api-3'):
            self.assertTrue(is_valid_slug(slug), slug)
            self.assertIsNone(get_slug_error_message(slug))

    def test_messages(self):
        self.assertEqual(get_slug_error_message(''), 'Slug is required')
        self.assertEqual(
            get_slug_error_message('has space'),
            'Slug cannot contain spaces. Use hyphens (-) instead',
        )
        self.assertEqual(get_slug_error_message('Upper'), 'Slug must be lowercase')
        self.assertEqual(get_slug_error_message('-edge'), 'Slug cannot start or end with a hyphen')
        self.assertEqual(
            get_slug_error_message('a_b'),
            'Slug can only contain lowercase letters, numbers, and hyphens',
        )
        self.assertEqual(get_slug_error_message('a--b'), 'Invalid slug format')

    def test_normalize_uses_fallback(self):
        self.assertEqual(normalize_slug('', 'My Page'), 'my-page')
        self.assertEqual(normalize_slug('Custom Slug', 'ignored'), 'custom-slug')

    def test_normalize_rejects_unsluggable_text(self):
        with self.assertRaises(ValidationError) as ctx:
            normalize_slug(None, '🚀🚀')
        self.assertEqual(ctx.exception.detail['slug'][0], 'Slug is required')
