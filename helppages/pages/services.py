"""
Бизнес-логика страниц: создание, обновление (в т.ч. автосейв) и
восстановление из ревизии. Views только разбирают запрос и
отдают результат, права проверяются здесь через documentation.policy.
"""
import logging
import uuid

from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from documentation import policy
from documentation.models import Doc, DocItem, NavHeader
from documentation.slugs import normalize_slug

from .models import Page, PageRevision
from .revisions import build_search_index, should_snapshot, snapshot_page
from .serializers import PageWriteSerializer

logger = logging.getLogger(__name__)

DUPLICATE_PAGE_SLUG = 'A page with this slug already exists in this documentation'

# Поля, которые копируются из запроса как есть
PLAIN_FIELDS = ('content', 'draft_content', 'position', 'author', 'tags', 'meta_title', 'meta_description')


def is_autosave_request(request):
    header = request.META.get('HTTP_X_AUTOSAVE', '').lower()
    body_flag = request.data.get('is_autosave') if hasattr(request.data, 'get') else None
    return header == 'true' or body_flag is True or str(body_flag).lower() == 'true'


def _validated(data, partial):
    serializer = PageWriteSerializer(data=data, partial=partial)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


def _check_slug_free(doc, doc_item, slug, exclude=None):
    duplicates = Page.objects.filter(doc=doc, doc_item=doc_item, slug=slug)
    if exclude is not None:
        duplicates = duplicates.exclude(pk=exclude.pk)
    return not duplicates.exists()


def _resolve_relations(doc, data, page=None):
    """doc_item / nav_header / parent из запроса, все должны принадлежать doc."""
    resolved = {}
    if 'doc_item_id' in data:
        resolved['doc_item'] = (
            get_object_or_404(DocItem, pk=data['doc_item_id'], nav_header__doc=doc)
            if data['doc_item_id'] else None
        )
    if 'nav_header_id' in data:
        resolved['nav_header'] = (
            get_object_or_404(NavHeader, pk=data['nav_header_id'], doc=doc)
            if data['nav_header_id'] else None
        )
    if 'parent_id' in data:
        parent = None
        if data['parent_id']:
            parent = get_object_or_404(Page, pk=data['parent_id'], doc=doc)
            if page is not None and parent.pk == page.pk:
                raise ValidationError({'parent_id': 'A page cannot be its own parent'})
        resolved['parent'] = parent
    return resolved


def _normalize_status(value, page_id=None):
    status = str(value).strip().lower()
    if status in Page.Status.values:
        return status
    logger.warning('Invalid status %r for page %s, falling back to draft', value, page_id)
    return Page.Status.DRAFT


def create_page(user, data, allow_publish=False):
    """
    Новая страница в документации. Создаётся черновиком
    (allow_publish=True разрешает сразу published, нужно внешнему API).
    """
    if not data.get('title') or not data.get('doc_id'):
        raise ValidationError({'error': 'title and doc_id are required'})
    validated = _validated(data, partial=False)

    doc = Doc.objects.filter(pk=validated['doc_id']).first()
    if doc is None:
        raise NotFound('Documentation not found')
    if not policy.can_manage_doc(user, doc):
        raise PermissionDenied('Forbidden: You cannot add pages to this documentation')

    relations = _resolve_relations(doc, validated)
    slug = normalize_slug(validated.get('slug'), validated['title'])
    if not _check_slug_free(doc, relations.get('doc_item'), slug):
        raise ValidationError({'slug': DUPLICATE_PAGE_SLUG})

    summary = validated.get('summary', validated.get('description')) or None
    status = Page.Status.DRAFT
    if allow_publish and 'status' in validated:
        status = _normalize_status(validated['status'])

    page = Page(
        doc=doc,
        user=user,
        title=validated['title'],
        slug=slug,
        summary=summary,
        status=status,
        last_edited_by=user.username,
        **relations,
    )
    for field in PLAIN_FIELDS:
        if field in validated:
            setattr(page, field, validated[field])
    if page.is_published:
        page.published_at = timezone.now()
    page.search_index = build_search_index(page.title, page.content, page.summary)
    page.save()

    logger.info('Page created: %s/%s by %s', doc.slug, page.slug, user.username)
    return page


@transaction.atomic
def update_page(user, page, data, is_autosave=False, force_snapshot=False):
    """
    Частичное обновление страницы.

    force_snapshot=True снимает ревизию до записи всегда, даже без
    изменений (так работает внешний API).

    Возвращает (page, список изменённых полей). Пустой список при
    обычном сохранении означает, что в запросе не было полей.
    """
    if 'is_public' in data:
        logger.warning(
            'is_public ignored for page %s: visibility is inherited from the documentation', page.pk
        )

    if not policy.can_edit_page(user, page):
        raise PermissionDenied('Forbidden: You cannot edit this page')

    validated = _validated(data, partial=True)
    updates = {}

    if 'title' in validated:
        updates['title'] = validated['title']

    # Связи раньше slug: уникальность проверяется уже в новом doc_item
    relations = _resolve_relations(page.doc, validated, page=page)
    if 'slug' in validated:
        updates['slug'] = normalize_slug(validated['slug'], updates.get('title', page.title))

    slug = updates.get('slug', page.slug)
    doc_item = relations.get('doc_item', page.doc_item)
    doc_item_changed = (doc_item.pk if doc_item else None) != page.doc_item_id
    if (slug != page.slug or doc_item_changed) and not _check_slug_free(page.doc, doc_item, slug, exclude=page):
        raise ValidationError({'slug': DUPLICATE_PAGE_SLUG})

    for field in PLAIN_FIELDS:
        if field in validated:
            updates[field] = validated[field]

    if 'summary' in validated:
        updates['summary'] = validated['summary'] or None
    elif 'description' in validated:
        updates['summary'] = validated['description'] or None

    if 'status' in validated:
        updates['status'] = _normalize_status(validated['status'], page.pk)
        if updates['status'] == Page.Status.PUBLISHED and page.published_at is None:
            updates['published_at'] = timezone.now()

    updates.update(relations)

    if force_snapshot:
        snapshot_page(page, user, change_log=data.get('change_log') or 'API update')

    if not updates:
        if is_autosave:
            # Автосейв без изменений всё равно отмечает активность
            page.save(update_fields=['updated_at'])
        return page, []

    if not force_snapshot and should_snapshot(
        page,
        title=updates.get('title'),
        content=updates.get('content'),
        is_autosave=is_autosave,
    ):
        snapshot_page(page, user, change_log=data.get('change_log') or ('Autosave' if is_autosave else None))

    for field, value in updates.items():
        setattr(page, field, value)
    if {'title', 'content', 'summary'} & updates.keys():
        page.search_index = build_search_index(page.title, page.content, page.summary)
    page.last_edited_by = user.username
    page.save()

    logger.info(
        'Page %s updated by %s (autosave=%s, fields=%s)',
        page.pk, user.username, is_autosave, sorted(updates),
    )
    return page, list(updates)


@transaction.atomic
def restore_revision(user, page, revision_id):
    """Откат страницы к ревизии с резервной ревизией текущего состояния."""
    if not revision_id:
        raise ValidationError({'revision_id': 'revision_id is required'})
    if not policy.can_edit_page(user, page):
        raise PermissionDenied('Forbidden: You cannot restore this page')

    try:
        revision_uuid = uuid.UUID(str(revision_id))
    except ValueError:
        raise NotFound('Revision not found')
    revision = PageRevision.objects.filter(pk=revision_uuid, page=page).first()
    if revision is None:
        raise NotFound('Revision not found')

    snapshot_page(page, user, change_log='Backup before restore')

    snapshot = revision.snapshot or {}
    page.title = snapshot.get('title', page.title)
    page.content = snapshot.get('content', page.content)
    page.summary = snapshot.get('summary', page.summary)
    page.status = _normalize_status(snapshot.get('status', page.status), page.pk)
    if page.is_published and page.published_at is None:
        page.published_at = timezone.now()
    page.search_index = build_search_index(page.title, page.content, page.summary)
    page.last_edited_by = user.username
    page.save()

    snapshot_page(
        page, user,
        change_log=f'Restored from version {timezone.localtime(revision.created_at):%Y-%m-%d %H:%M:%S}',
    )
    logger.info('Page %s restored from revision %s by %s', page.pk, revision.pk, user.username)
    return page
