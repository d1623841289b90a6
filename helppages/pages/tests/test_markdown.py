"""
Markdown → HTML для публичных страниц и экспорта.
"""
from django.test import SimpleTestCase

from pages.markdown import extract_headings, heading_id, render_inline, render_markdown


class RenderMarkdownTests(SimpleTestCase):

    def test_empty(self):
        self.assertEqual(render_markdown(''), '')
        self.assertEqual(render_markdown(None), '')

    def test_headings_have_anchor_ids(self):
        html = render_markdown('# Getting Started!\n## Next steps')
        self.assertIn('<h1 id="getting-started">Getting Started!</h1>', html)
        self.assertIn('<h2 id="next-steps">Next steps</h2>', html)

    def test_html_is_escaped(self):
        html = render_markdown('<script>alert(1)</script>')
        self.assertNotIn('<script>', html)
        self.assertIn('&lt;script&gt;', html)

    def test_lists(self):
        html = render_markdown('- one\n- two\n\n1. first\n2. second')
        self.assertEqual(
            html,
            '<ul>\n<li>one</li>\n<li>two</li>\n</ul>\n<ol>\n<li>first</li>\n<li>second</li>\n</ol>',
        )

    def test_code_block_is_not_formatted(self):
        html = render_markdown('```\n# not a heading\n<b>x</b>\n```')
        self.assertEqual(html, '<pre><code># not a heading\n&lt;b&gt;x&lt;/b&gt;</code></pre>')

    def test_unclosed_code_block(self):
        html = render_markdown('```\nprint(1)')
        self.assertEqual(html, '<pre><code>print(1)</code></pre>')

    def test_quote_and_rule(self):
        html = render_markdown('> note\n---\ntext')
        self.assertEqual(html, '<blockquote>note</blockquote>\n<hr>\n<p>text</p>')


class RenderInlineTests(SimpleTestCase):

    def test_emphasis_and_code(self):
        self.assertEqual(
            render_inline('**bold** and *em* with `code`'),
            '<strong>bold</strong> and <em>em</em> with <code>code</code>',
        )

    def test_safe_links(self):
        self.assertEqual(render_inline('[Docs](https://example.com)'), '<a href="https://example.com">Docs</a>')
        self.assertEqual(render_inline('[Home](/docs/guide)'), '<a href="/docs/guide">Home</a>')

    def test_unsafe_link_is_plain_text(self):
        self.assertEqual(render_inline('[click](javascript:alert(1))'), 'click)')


class HeadingsTests(SimpleTestCase):

    def test_heading_id(self):
        self.assertEqual(heading_id('API  Reference (v2)'), 'api-reference-v2')

    def test_extract_headings(self):
        text = '# Title\ntext\n### Deep\n#### too deep'
        self.assertEqual(extract_headings(text), [
            {'level': 1, 'text': 'Title', 'id': 'title'},
            {'level': 3, 'text': 'Deep', 'id': 'deep'},
        ])
