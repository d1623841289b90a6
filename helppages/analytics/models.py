"""
Аналитика публичных страниц: просмотры, отзывы "помогла ли страница"
и поисковые запросы. Пишется из Celery-задач (analytics.tasks) и
публичных эндпоинтов, кабинет только читает.
"""

from django.conf import settings
from django.db import models


class PageView(models.Model):
    page = models.ForeignKey('pages.Page', on_delete=models.CASCADE, related_name='views')
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='page_views',
        help_text='Пусто для анонимных просмотров',
    )
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True, default='')
    referrer = models.TextField(blank=True, default='')
    viewed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-viewed_at']
        verbose_name = 'page view'
        verbose_name_plural = 'page views'
        indexes = [
            models.Index(fields=['page', '-viewed_at'], name='pageview_page_viewed_idx'),
        ]

    def __str__(self):
        return f'{self.page_id} @ {self.viewed_at:%Y-%m-%d %H:%M}'


class PageFeedback(models.Model):
    page = models.ForeignKey('pages.Page', on_delete=models.CASCADE, related_name='feedback')
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='page_feedback',
    )
    is_helpful = models.BooleanField()
    comment = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'page feedback'
        verbose_name_plural = 'page feedback'

    def __str__(self):
        return f"{self.page_id}: {'+' if self.is_helpful else '-'}"


class SearchQuery(models.Model):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='search_queries',
    )
    query = models.CharField(max_length=500)
    results_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'search query'
        verbose_name_plural = 'search queries'

    def __str__(self):
        return f'{self.query} ({self.results_count})'
