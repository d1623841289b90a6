"""
Политика ревизий страниц.

Обычное сохранение, изменившее заголовок или контент, всегда
создаёт ревизию. Автосейв — только если сменился заголовок или длина
контента изменилась больше чем на AUTOSAVE_REVISION_THRESHOLD_PERCENT,
иначе история забилась бы снимками каждые две секунды.

Ревизия хранит состояние страницы ДО изменения.
"""
import logging

from django.conf import settings
from django.db import transaction

from .models import PageRevision

logger = logging.getLogger(__name__)

SNAPSHOT_FIELDS = ('title', 'slug', 'content', 'summary', 'status')


def content_change_percent(old, new):
    old_length = len(old or '')
    new_length = len(new or '')
    if old_length == 0:
        return 100.0 if new_length > 0 else 0.0
    return abs(new_length - old_length) / old_length * 100


def should_snapshot(page, *, title=None, content=None, is_autosave=False):
    """
    Нужна ли ревизия перед записью title / content в page.

    None означает, что поле в обновлении не пришло.
    """
    title_changed = title is not None and title != page.title
    content_changed = content is not None and content != page.content
    if not (title_changed or content_changed):
        return False
    if not is_autosave:
        return True
    if title_changed:
        return True
    threshold = getattr(settings, 'AUTOSAVE_REVISION_THRESHOLD_PERCENT', 10)
    return content_change_percent(page.content, content) > threshold


def make_snapshot(page):
    return {field: getattr(page, field) for field in SNAPSHOT_FIELDS}


def snapshot_page(page, user, change_log=None):
    """
    Сохраняет текущее состояние страницы.

    Ошибка записи ревизии логируется и не ломает сохранение страницы.
    """
    try:
        with transaction.atomic():
            return PageRevision.objects.create(
                page=page,
                user=user if getattr(user, 'is_authenticated', False) else None,
                snapshot=make_snapshot(page),
                change_log=change_log,
            )
    except Exception:
        logger.exception('Failed to create revision for page %s', page.pk)
        return None


def build_search_index(title, content, summary):
    return f'{title or ""} {content or ""} {summary or ""}'.lower().strip()
