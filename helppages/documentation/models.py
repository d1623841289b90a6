"""
Документации и их навигация.

Doc        — документация пользователя (helppages.ai/docs/<slug>)
NavHeader  — раздел навигации. Верхнеуровневый (doc_item=None, parent=None)
             работает как выпадающее меню, вложенные — как секции сайдбара.
DocItem    — пункт выпадающего меню; внутри него свои разделы и страницы.
"""

import uuid

from django.conf import settings
from django.db import models


class Doc(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='docs',
        help_text='Владелец документации',
    )
    title = models.CharField(max_length=200)
    slug = models.SlugField(max_length=200, unique=True, help_text='Глобально уникальный')
    description = models.TextField(blank=True, default='')
    is_public = models.BooleanField(
        default=True,
        help_text='Видимость всех страниц документации наследуется отсюда',
    )
    theme = models.JSONField(default=dict, blank=True, help_text='Цвета, логотип и т.п.')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-updated_at']
        verbose_name = 'documentation'
        verbose_name_plural = 'documentations'
        indexes = [
            models.Index(fields=['user', '-updated_at'], name='doc_user_updated_idx'),
        ]

    def __str__(self):
        return f'{self.title} ({self.slug})'


class NavHeader(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    doc = models.ForeignKey(Doc, on_delete=models.CASCADE, related_name='nav_headers')
    doc_item = models.ForeignKey(
        'DocItem',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='nav_headers',
        help_text='Пусто у верхнеуровневых разделов (выпадающих меню)',
    )
    parent = models.ForeignKey(
        'self',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='children',
    )
    label = models.CharField(max_length=200)
    slug = models.SlugField(max_length=200)
    position = models.IntegerField(default=0)
    icon = models.CharField(max_length=50, blank=True, default='')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['position', 'created_at']
        verbose_name = 'navigation section'
        verbose_name_plural = 'navigation sections'
        indexes = [
            models.Index(fields=['doc', 'position'], name='navheader_doc_position_idx'),
        ]

    def __str__(self):
        return self.label


class DocItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    nav_header = models.ForeignKey(NavHeader, on_delete=models.CASCADE, related_name='doc_items')
    label = models.CharField(max_length=200)
    slug = models.SlugField(max_length=200)
    description = models.TextField(blank=True, default='')
    position = models.IntegerField(default=0)
    is_default = models.BooleanField(
        default=False,
        help_text='Открывается по умолчанию. Не больше одного на раздел',
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['position', 'created_at']
        unique_together = ['nav_header', 'slug']
        verbose_name = 'doc item'
        verbose_name_plural = 'doc items'

    def __str__(self):
        return self.label

    @property
    def doc(self):
        return self.nav_header.doc
