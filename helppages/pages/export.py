"""
Экспорт страницы в markdown (с YAML front matter) и standalone HTML.
"""
from django.template.loader import render_to_string
from django.utils import timezone

from .markdown import render_markdown

EXPORT_FORMATS = ('markdown', 'html', 'pdf')


def _yaml_string(value):
    return '"' + str(value or '').replace('\\', '\\\\').replace('"', '\\"') + '"'


def export_markdown(page):
    author = page.author or page.user.full_name or page.user.username
    category = page.nav_header.label if page.nav_header_id else 'Uncategorized'
    date = timezone.localtime(page.published_at or page.updated_at).date().isoformat()

    lines = [
        '---',
        f'title: {_yaml_string(page.title)}',
        f'author: {_yaml_string(author)}',
        f'category: {_yaml_string(category)}',
        f'date: {date}',
        f'status: {page.status}',
        '---',
        '',
        f'# {page.title}',
        '',
    ]
    if page.summary:
        lines.extend([f'> {page.summary}', ''])
    lines.extend([
        page.content or '',
        '',
        '---',
        '',
        f'*Exported from HelpPages on {timezone.localdate().isoformat()}*',
        '',
    ])
    return '\n'.join(lines)


def export_html(page):
    return render_to_string('pages/export.html', {
        'page': page,
        'content_html': render_markdown(page.content),
        'exported_at': timezone.localdate(),
    })


def export_filename(page, extension):
    return f'{page.slug}.{extension}'
