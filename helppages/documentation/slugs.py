"""
Slug'и документаций, разделов и страниц.

Один набор правил для всех сущностей: латиница в нижнем регистре,
цифры и одиночные дефисы между ними ("getting-started").
"""
import re

from rest_framework.exceptions import ValidationError

SLUG_REGEX = re.compile(r'^[a-z0-9]+(?:-[a-z0-9]+)*$')


def generate_slug(text):
    """'  Getting Started_Guide! ' → 'getting-started-guide'"""
    slug = (text or '').lower().strip()
    slug = re.sub(r'[^\w\s-]', '', slug, flags=re.ASCII)
    slug = re.sub(r'[\s_]+', '-', slug)
    slug = re.sub(r'-+', '-', slug)
    return slug.strip('-')


def is_valid_slug(slug):
    return bool(slug) and SLUG_REGEX.match(slug) is not None


def get_slug_error_message(slug):
    """Человекочитаемая причина, почему slug невалиден. None для валидного."""
    if not slug:
        return 'Slug is required'
    if is_valid_slug(slug):
        return None
    if re.search(r'\s', slug):
        return 'Slug cannot contain spaces. Use hyphens (-) instead'
    if slug != slug.lower():
        return 'Slug must be lowercase'
    if slug.startswith('-') or slug.endswith('-'):
        return 'Slug cannot start or end with a hyphen'
    if re.search(r'[^a-z0-9-]', slug):
        return 'Slug can only contain lowercase letters, numbers, and hyphens'
    return 'Invalid slug format'


def normalize_slug(value, fallback=''):
    """
    slug из value (или fallback, если value пуст) с валидацией.

    Бросает ValidationError с причиной, если из текста не получилось
    валидного slug'а (например, заголовок только из эмодзи).
    """
    slug = generate_slug(value or fallback)
    error = get_slug_error_message(slug)
    if error:
        raise ValidationError({'slug': error})
    return slug
