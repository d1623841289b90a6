"""Celery-задачи аналитики: просмотры страниц, журнал поиска и чистка ревизий."""
import logging

from celery import shared_task
from django.conf import settings
from django.db import transaction
from django.db.models import Count, F
from django.utils import timezone

from pages.models import Page, PageRevision

from .models import PageView, SearchQuery

logger = logging.getLogger(__name__)


@shared_task
def record_page_view(page_id, user_id=None, ip_address=None, user_agent='', referrer=''):
    """Атомарно увеличивает view_count и пишет PageView, оба или ничего."""
    with transaction.atomic():
        updated = Page.objects.filter(pk=page_id).update(view_count=F('view_count') + 1)
        if not updated:
            logger.warning('Page view for missing page %s', page_id)
            return {'recorded': False}

        PageView.objects.create(
            page_id=page_id,
            user_id=user_id,
            ip_address=ip_address or None,
            user_agent=user_agent or '',
            referrer=referrer or '',
        )
    return {'recorded': True}


@shared_task
def log_search_query(user_id, query, results_count):
    SearchQuery.objects.create(user_id=user_id, query=query[:500], results_count=results_count)


@shared_task
def prune_page_revisions():
    """Оставляет по PAGE_REVISIONS_KEEP последних ревизий на страницу."""
    keep = getattr(settings, 'PAGE_REVISIONS_KEEP', 200)
    now = timezone.now()

    page_ids = list(
        PageRevision.objects.order_by()
        .values('page_id')
        .annotate(total=Count('id'))
        .filter(total__gt=keep)
        .values_list('page_id', flat=True)
    )

    deleted = 0
    for page_id in page_ids:
        stale_ids = list(
            PageRevision.objects.filter(page_id=page_id)
            .order_by('-created_at')
            .values_list('id', flat=True)[keep:]
        )
        count, _ = PageRevision.objects.filter(id__in=stale_ids).delete()
        deleted += count

    if deleted:
        logger.info('Pruned %s revisions across %s pages', deleted, len(page_ids))
    return {
        'pages': len(page_ids),
        'deleted': deleted,
        'timestamp': now.isoformat(),
    }
