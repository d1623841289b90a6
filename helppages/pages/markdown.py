"""
Построчный markdown → HTML для публичных страниц и экспорта.

Поддерживается подмножество, которым пользуется редактор:

    ```                  — блок кода (до закрывающих ```)
    # / ## / ###         — заголовки с id для якорей оглавления
    - item / * item      — маркированный список
    1. item              — нумерованный список
    > quote              — цитата
    ---                  — горизонтальная линия
    **bold** *em* `code` [text](url) — внутри строк

Текст экранируется до разметки, так что HTML из контента страницы
не попадает в вывод как есть.
"""
import re

from django.utils.html import escape

HEADING_RE = re.compile(r'^(#{1,3})\s+(.+)$')
UNORDERED_RE = re.compile(r'^[-*]\s+(.*)$')
ORDERED_RE = re.compile(r'^\d+\.\s+(.*)$')
HR_RE = re.compile(r'^-{3,}$')

BOLD_RE = re.compile(r'\*\*(.+?)\*\*')
EM_RE = re.compile(r'\*(.+?)\*')
CODE_RE = re.compile(r'`([^`]+)`')
LINK_RE = re.compile(r'\[([^\]]+)\]\(([^)\s]+)\)')

SAFE_URL_RE = re.compile(r'^(https?://|mailto:|/|#)', re.IGNORECASE)


def heading_id(text):
    """'Getting Started!' → 'getting-started'"""
    return re.sub(r'[^a-z0-9]+', '-', text.lower()).strip('-')


def _link(match):
    text, url = match.group(1), match.group(2)
    # escape() уже превратил & в &amp;, в href это корректно
    if not SAFE_URL_RE.match(url):
        return text
    return f'<a href="{url}">{text}</a>'


def render_inline(text):
    html = escape(text)
    html = CODE_RE.sub(r'<code>\1</code>', html)
    html = BOLD_RE.sub(r'<strong>\1</strong>', html)
    html = EM_RE.sub(r'<em>\1</em>', html)
    html = LINK_RE.sub(_link, html)
    return html


def render_markdown(text):
    if not text:
        return ''

    html = []
    list_kind = None
    in_code = False
    code_lines = []

    def close_list():
        nonlocal list_kind
        if list_kind:
            html.append(f'</{list_kind}>')
            list_kind = None

    for raw_line in text.splitlines():
        line = raw_line.rstrip()

        if line.strip().startswith('```'):
            if in_code:
                html.append(f'<pre><code>{escape(chr(10).join(code_lines))}</code></pre>')
                code_lines = []
                in_code = False
            else:
                close_list()
                in_code = True
            continue

        if in_code:
            code_lines.append(raw_line)
            continue

        stripped = line.strip()
        if not stripped:
            close_list()
            continue

        heading = HEADING_RE.match(stripped)
        if heading:
            close_list()
            level = len(heading.group(1))
            title = heading.group(2).strip()
            html.append(f'<h{level} id="{heading_id(title)}">{render_inline(title)}</h{level}>')
            continue

        if HR_RE.match(stripped):
            close_list()
            html.append('<hr>')
            continue

        unordered = UNORDERED_RE.match(stripped)
        ordered = ORDERED_RE.match(stripped)
        if unordered or ordered:
            kind = 'ul' if unordered else 'ol'
            if list_kind != kind:
                close_list()
                html.append(f'<{kind}>')
                list_kind = kind
            html.append(f'<li>{render_inline((unordered or ordered).group(1))}</li>')
            continue

        close_list()
        if stripped.startswith('> '):
            html.append(f'<blockquote>{render_inline(stripped[2:])}</blockquote>')
        else:
            html.append(f'<p>{render_inline(stripped)}</p>')

    close_list()
    if in_code:
        # Незакрытый блок кода выводим до конца документа
        html.append(f'<pre><code>{escape(chr(10).join(code_lines))}</code></pre>')

    return '\n'.join(html)


def extract_headings(text):
    """Заголовки # - ### для оглавления: [{level, text, id}]."""
    headings = []
    for line in (text or '').splitlines():
        match = HEADING_RE.match(line.strip())
        if match:
            title = match.group(2).strip()
            headings.append({'level': len(match.group(1)), 'text': title, 'id': heading_id(title)})
    return headings
