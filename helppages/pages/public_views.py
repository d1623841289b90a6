"""
Публичный сайт документации (серверный рендер).

    /                              — индекс пользователя на его субдомене,
                                     JSON сервиса на основном домене
    /u/<username>/                 — публичные документации пользователя
    /u/<username>/<slug>/          — опубликованная страница пользователя
    /docs/<doc_slug>/              — редирект на первую страницу документации
    /docs/<doc_slug>/<page_slug>/  — страница документации

Показываются только опубликованные страницы публичных документаций.
"""
import logging

from django.contrib.auth import get_user_model
from django.http import Http404, JsonResponse
from django.shortcuts import redirect, render
from django.urls import reverse

from documentation import policy
from documentation.models import Doc
from documentation.tree import build_doc_tree

from .markdown import extract_headings, render_markdown
from .models import Page

logger = logging.getLogger(__name__)
User = get_user_model()


def _published(queryset):
    return queryset.filter(status=Page.Status.PUBLISHED)


def _public_docs(user):
    return Doc.objects.filter(user=user, is_public=True).order_by('-updated_at')


def _ancestors(page):
    """Родительские страницы от корня к непосредственному родителю."""
    chain = []
    parent = page.parent
    while parent is not None and len(chain) < 20:
        chain.insert(0, parent)
        parent = parent.parent
    return chain


def _render_page(request, page, breadcrumbs, page_url, extra=None):
    children = _published(page.children.all()).order_by('position', 'created_at')
    context = {
        'page': page,
        'doc': page.doc,
        'breadcrumbs': breadcrumbs,
        'content_html': render_markdown(page.content),
        'headings': extract_headings(page.content),
        'children': [
            {'title': child.title, 'summary': child.summary, 'url': page_url(child)}
            for child in children
        ],
    }
    context.update(extra or {})
    return render(request, 'pages/public/page.html', context)


def _render_user_index(request, owner):
    docs = _public_docs(owner)
    return render(request, 'pages/public/user_index.html', {
        'owner': owner,
        'docs': docs,
    })


def home(request):
    subdomain = getattr(request, 'subdomain', None)
    if subdomain:
        owner = getattr(request, 'tenant_user', None)
        if owner is None:
            raise Http404('No documentation on this subdomain')
        if not owner.is_public:
            return render(request, 'pages/public/private.html', {'owner': owner}, status=403)
        return _render_user_index(request, owner)

    return JsonResponse({
        'status': 'ok',
        'service': 'helppages',
        'message': 'HelpPages API is under /api/. Public docs are served on user subdomains.',
    })


def _get_public_owner(username):
    username = username.lstrip('@')
    owner = User.objects.filter(username__iexact=username, is_active=True).first()
    if owner is None:
        raise Http404(f'User @{username} does not exist')
    return owner


def user_docs(request, username):
    owner = _get_public_owner(username)
    if not owner.is_public:
        return render(request, 'pages/public/private.html', {'owner': owner}, status=403)
    return _render_user_index(request, owner)


def user_page(request, username, slug):
    owner = _get_public_owner(username)
    if not owner.is_public:
        return render(request, 'pages/public/private.html', {'owner': owner}, status=403)

    page = (
        _published(Page.objects.filter(doc__user=owner, doc__is_public=True, slug=slug))
        .select_related('doc', 'parent', 'nav_header')
        .order_by('position', 'created_at')
        .first()
    )
    if page is None:
        raise Http404('Page not found')

    def page_url(target):
        return reverse('public-user-page', args=[owner.username, target.slug])

    breadcrumbs = [{'label': owner.full_name or f'@{owner.username}',
                    'url': reverse('public-user-docs', args=[owner.username])}]
    breadcrumbs += [{'label': parent.title, 'url': page_url(parent)} for parent in _ancestors(page)]
    breadcrumbs.append({'label': page.title, 'url': None})
    return _render_page(request, page, breadcrumbs, page_url, {'owner': owner})


def _get_public_doc(request, doc_slug):
    doc = Doc.objects.select_related('user').filter(slug=doc_slug).first()
    if doc is None or not policy.can_view_doc(request.user, doc):
        raise Http404('Documentation not found')

    # На субдомене видны только документации его владельца
    subdomain = getattr(request, 'subdomain', None)
    if subdomain:
        owner = getattr(request, 'tenant_user', None)
        if owner is None or doc.user_id != owner.pk:
            logger.info('Doc %s requested on foreign subdomain %s', doc.slug, subdomain)
            raise Http404('Documentation not found')
    return doc


def doc_index(request, doc_slug):
    doc = _get_public_doc(request, doc_slug)
    first_page = (
        _published(doc.pages.filter(parent__isnull=True))
        .order_by('position', 'created_at')
        .first()
    )
    if first_page is not None:
        return redirect('public-doc-page', doc_slug=doc.slug, page_slug=first_page.slug)

    return render(request, 'pages/public/doc.html', {
        'doc': doc,
        'tree': build_doc_tree(doc, include_drafts=False),
        'can_edit': policy.can_manage_doc(request.user, doc),
    })


def doc_page(request, doc_slug, page_slug):
    doc = _get_public_doc(request, doc_slug)
    page = (
        _published(doc.pages.filter(slug=page_slug))
        .select_related('doc', 'parent', 'nav_header')
        .order_by('position', 'created_at')
        .first()
    )
    if page is None:
        raise Http404('Page not found')

    def page_url(target):
        return reverse('public-doc-page', args=[doc.slug, target.slug])

    breadcrumbs = [{'label': doc.title, 'url': reverse('public-doc', args=[doc.slug])}]
    breadcrumbs += [{'label': parent.title, 'url': page_url(parent)} for parent in _ancestors(page)]
    breadcrumbs.append({'label': page.title, 'url': None})
    return _render_page(request, page, breadcrumbs, page_url, {
        'tree': build_doc_tree(doc, include_drafts=False),
        'can_edit': policy.can_manage_doc(request.user, doc),
    })
