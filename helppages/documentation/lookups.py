"""Поиск объектов по id из запроса: невалидный UUID — это 404, а не 500."""
import uuid

from rest_framework.exceptions import NotFound

from .models import Doc


def parse_uuid(value):
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


def get_doc_or_404(doc_id):
    parsed = parse_uuid(doc_id)
    doc = Doc.objects.filter(pk=parsed).first() if parsed else None
    if doc is None:
        raise NotFound('Documentation not found')
    return doc
