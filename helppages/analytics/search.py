"""
Поиск по страницам и разделам навигации с подсветкой совпадений.

Текст режется по совпадениям до экранирования: в результат попадает
только наш <mark>, HTML из контента страниц выводится как текст.
"""
import re

from django.db.models import Q
from django.utils.html import escape

from documentation.models import NavHeader
from pages.models import Page
from tenants.context import get_current_tenant_user

EXCERPT_LENGTH = 150
SUMMARY_EXCERPT_LENGTH = 100
MAX_SECTION_RESULTS = 10


def highlight_text(text, query):
    if not text:
        return ''
    if not query:
        return escape(text)
    parts = re.split(f'({re.escape(query)})', text, flags=re.IGNORECASE)
    # Нечётные элементы split с группой - совпадения
    return ''.join(
        f'<mark>{escape(part)}</mark>' if i % 2 else escape(part)
        for i, part in enumerate(parts)
    )


def highlighted_excerpt(content, query, max_length=EXCERPT_LENGTH):
    """Окно max_length символов вокруг первого совпадения, с "..." по краям."""
    if not content:
        return ''

    index = content.lower().find(query.lower())
    if index == -1:
        excerpt = escape(content[:max_length])
        return f'{excerpt}...' if max_length < len(content) else excerpt

    half = max_length // 2
    start = max(0, index - half)
    end = min(len(content), index + len(query) + half)

    excerpt = highlight_text(content[start:end], query)
    if start > 0:
        excerpt = f'...{excerpt}'
    if end < len(content):
        excerpt = f'{excerpt}...'
    return excerpt


def _visible_pages(user, include_private):
    public = Q(status=Page.Status.PUBLISHED, doc__is_public=True)
    if include_private and user is not None and user.is_authenticated:
        # Опубликованное плюс свои страницы, в том числе черновики
        return Page.objects.filter(public | Q(user=user))
    return Page.objects.filter(public)


def search_pages(user, query, limit, include_private=False):
    matches = (
        Q(title__icontains=query)
        | Q(content__icontains=query)
        | Q(summary__icontains=query)
        | Q(search_index__icontains=query.lower())
    )
    pages = _visible_pages(user, include_private).filter(matches)

    tenant_user = get_current_tenant_user()
    if tenant_user is not None:
        pages = pages.filter(doc__user=tenant_user)

    pages = pages.select_related('user', 'nav_header', 'doc').order_by('-updated_at')[:limit]

    results = []
    for page in pages:
        summary = highlighted_excerpt(page.summary, query, SUMMARY_EXCERPT_LENGTH) if page.summary else ''
        results.append({
            'id': str(page.pk),
            'type': 'page',
            'title': highlight_text(page.title, query),
            'slug': page.slug,
            'summary': summary or highlighted_excerpt(page.content, query),
            'status': page.status,
            'is_public': page.doc.is_public,
            'updated_at': page.updated_at.isoformat(),
            'author': page.user.full_name or page.user.username,
            'category': page.nav_header.label if page.nav_header_id else 'Uncategorized',
            'url': f'/u/{page.user.username}/{page.slug}',
        })
    return results


def search_sections(user, query, include_private=False):
    sections = NavHeader.objects.filter(Q(label__icontains=query) | Q(slug__icontains=query))
    if include_private and user is not None and user.is_authenticated:
        sections = sections.filter(Q(doc__is_public=True) | Q(doc__user=user))
    else:
        sections = sections.filter(doc__is_public=True)

    tenant_user = get_current_tenant_user()
    if tenant_user is not None:
        sections = sections.filter(doc__user=tenant_user)

    sections = sections.select_related('parent').order_by('position', 'created_at')[:MAX_SECTION_RESULTS]
    return [
        {
            'id': str(section.pk),
            'type': 'category',
            'title': highlight_text(section.label, query),
            'slug': section.slug,
            'parent': section.parent.label if section.parent_id else None,
            'url': f'/cms/pages?header={section.pk}',
        }
        for section in sections
    ]
