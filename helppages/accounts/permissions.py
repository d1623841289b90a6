"""
Role-Based Access Control (RBAC) permission classes.

    from accounts.permissions import IsAdmin, IsSelfOrAdmin

    class MyView(APIView):
        permission_classes = [IsAuthenticated, IsAdmin]

Доступные классы:
- IsAdmin: только администраторы (role='admin')
- IsSelfOrAdmin: сам пользователь или админ (object-level, obj = User)
"""

from rest_framework.permissions import BasePermission
import logging

from . import roles

logger = logging.getLogger(__name__)


class IsAdmin(BasePermission):
    """Доступ только для администраторов (role='admin')"""
    message = 'Forbidden: Admin access required'

    def has_permission(self, request, view):
        return roles.has_role(request.user, roles.ADMIN)


class IsSelfOrAdmin(BasePermission):
    """
    Доступ только к своему профилю или для администратора.

    Object-level: obj — это User.
    """
    message = 'Forbidden'

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj):
        if obj.pk == request.user.pk:
            return True
        if roles.has_role(request.user, roles.ADMIN):
            return True
        logger.warning(
            'IsSelfOrAdmin denied: user=%s tried to access user=%s', request.user.pk, obj.pk
        )
        return False
