"""
Сборка дерева навигации документации для ответов API.

    doc
    ├── pages            — корневые страницы без раздела
    └── nav_headers      — верхнеуровневые разделы
        ├── pages        — корневые страницы раздела
        └── children     — подразделы, у каждого свои pages
"""
from django.db.models import Count, Prefetch

from pages.models import Page
from pages.serializers import PageListSerializer

from .models import NavHeader
from .serializers import DocItemSerializer, DocSerializer, NavHeaderSerializer


def _root_pages(queryset, include_drafts):
    queryset = queryset.filter(parent__isnull=True)
    if not include_drafts:
        queryset = queryset.filter(status=Page.Status.PUBLISHED)
    return queryset.order_by('position', 'created_at')


def _pages_prefetch(include_drafts):
    return Prefetch(
        'pages',
        queryset=_root_pages(Page.objects.all(), include_drafts),
        to_attr='root_pages',
    )


def serialize_section(nav_header, with_children=True):
    data = NavHeaderSerializer(nav_header).data
    data['pages'] = PageListSerializer(getattr(nav_header, 'root_pages', []), many=True).data
    if with_children:
        data['children'] = [
            serialize_section(child, with_children=False)
            for child in getattr(nav_header, 'child_sections', [])
        ]
    return data


def sections_queryset(include_drafts, **filters):
    """Разделы верхнего уровня (parent=None) с подразделами и страницами."""
    children = NavHeader.objects.order_by('position', 'created_at').prefetch_related(
        _pages_prefetch(include_drafts)
    )
    return (
        NavHeader.objects.filter(parent__isnull=True, **filters)
        .order_by('position', 'created_at')
        .prefetch_related(
            _pages_prefetch(include_drafts),
            Prefetch('children', queryset=children, to_attr='child_sections'),
        )
    )


def build_doc_tree(doc, include_drafts):
    data = DocSerializer(doc).data
    data['pages'] = PageListSerializer(
        _root_pages(doc.pages.filter(nav_header__isnull=True), include_drafts), many=True
    ).data
    data['nav_headers'] = [
        serialize_section(section)
        for section in sections_queryset(include_drafts, doc=doc, doc_item__isnull=True)
    ]
    return data


def build_doc_item_sections(doc, doc_item):
    """Разделы внутри пункта выпадающего меню (режим кабинета, с черновиками)."""
    return [
        serialize_section(section)
        for section in sections_queryset(True, doc=doc, doc_item=doc_item)
    ]


def build_dropdowns(doc):
    """Верхнеуровневые разделы-меню со своими пунктами и их счётчиками."""
    headers = (
        NavHeader.objects.filter(doc=doc, doc_item__isnull=True, parent__isnull=True)
        .order_by('position', 'created_at')
    )
    result = []
    for header in headers:
        data = NavHeaderSerializer(header).data
        items = header.doc_items.annotate(
            pages_count=Count('pages', distinct=True),
            sections_count=Count('nav_headers', distinct=True),
        ).order_by('position', 'created_at')
        data['doc_items'] = DocItemSerializer(items, many=True).data
        result.append(data)
    return result
