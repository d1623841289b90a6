"""
DRF permission classes поверх documentation.policy.

Object-level: obj — Doc, NavHeader, DocItem или Page.
"""
from rest_framework.permissions import SAFE_METHODS, BasePermission

from . import policy


def doc_of(obj):
    """Документация, к которой относится объект (сам Doc — сам себе)."""
    return getattr(obj, 'doc', obj)


class CanManageDoc(BasePermission):
    """Чтение и изменение: владелец, admin или editor. Удаление: владелец или admin."""

    message = 'Forbidden'

    def has_object_permission(self, request, view, obj):
        doc = doc_of(obj)
        if request.method == 'DELETE':
            self.message = 'Forbidden: Only doc owner or admin can delete'
            return policy.can_delete_doc(request.user, doc)
        return policy.can_manage_doc(request.user, doc)


class CanEditPage(BasePermission):
    """
    GET — can_view_page, PUT/PATCH — can_edit_page,
    DELETE — владелец документации или admin.
    """

    message = 'Forbidden'

    def has_object_permission(self, request, view, obj):
        if request.method in SAFE_METHODS:
            return policy.can_view_page(request.user, obj)
        if request.method == 'DELETE':
            self.message = 'Forbidden: Only doc owner or admin can delete pages'
            return policy.can_delete_page(request.user, obj)
        return policy.can_edit_page(request.user, obj)
