"""
Страницы документации и их ревизии.

У страницы нет собственного флага публичности: видимость наследуется
от Doc.is_public, а status (draft / published) определяет, видна ли
страница вне кабинета.
"""

import uuid

from django.conf import settings
from django.db import models


class Page(models.Model):

    class Status(models.TextChoices):
        DRAFT = 'draft', 'Draft'
        PUBLISHED = 'published', 'Published'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    doc = models.ForeignKey('documentation.Doc', on_delete=models.CASCADE, related_name='pages')
    doc_item = models.ForeignKey(
        'documentation.DocItem',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='pages',
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='pages',
        help_text='Автор страницы',
    )
    nav_header = models.ForeignKey(
        'documentation.NavHeader',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='pages',
        help_text='Раздел навигации. При удалении раздела страница остаётся без него',
    )
    parent = models.ForeignKey(
        'self',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='children',
    )

    title = models.CharField(max_length=300)
    slug = models.SlugField(max_length=200)
    summary = models.TextField(null=True, blank=True)
    content = models.TextField(blank=True, default='', help_text='Markdown')
    draft_content = models.TextField(null=True, blank=True)
    search_index = models.TextField(blank=True, default='', help_text='title + content + summary в нижнем регистре')

    status = models.CharField(max_length=10, choices=Status.choices, default=Status.DRAFT, db_index=True)
    position = models.IntegerField(default=0)
    view_count = models.PositiveIntegerField(default=0)

    author = models.CharField(max_length=200, blank=True, default='')
    tags = models.JSONField(default=list, blank=True)
    meta_title = models.CharField(max_length=300, blank=True, default='')
    meta_description = models.TextField(blank=True, default='')

    published_at = models.DateTimeField(null=True, blank=True)
    last_edited_by = models.CharField(max_length=150, blank=True, default='')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['position', 'created_at']
        unique_together = ['doc', 'doc_item', 'slug']
        verbose_name = 'page'
        verbose_name_plural = 'pages'
        indexes = [
            models.Index(fields=['doc', 'status'], name='page_doc_status_idx'),
            models.Index(fields=['nav_header', 'position'], name='page_nav_position_idx'),
        ]

    def __str__(self):
        return f'{self.title} ({self.status})'

    @property
    def is_published(self):
        return self.status == self.Status.PUBLISHED


class PageRevision(models.Model):
    """Снимок страницы (title, slug, content, summary, status) до изменения."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    page = models.ForeignKey(Page, on_delete=models.CASCADE, related_name='revisions')
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='page_revisions',
    )
    snapshot = models.JSONField()
    change_log = models.CharField(max_length=500, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'page revision'
        verbose_name_plural = 'page revisions'

    def __str__(self):
        return f'{self.page_id} @ {self.created_at:%Y-%m-%d %H:%M:%S}'
