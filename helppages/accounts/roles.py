"""
Матрица прав по глобальным ролям.

    admin  — всё
    editor — создавать, редактировать, публиковать, смотреть аналитику
    viewer — ничего (но свои документации ведёт сам, см. documentation.policy)

Используется профилем (/api/auth/profile/ отдаёт permissions фронтенду)
и проверками ролей во views.
"""
from rest_framework.exceptions import NotAuthenticated, PermissionDenied

ADMIN = 'admin'
EDITOR = 'editor'
VIEWER = 'viewer'
ROLES = (ADMIN, EDITOR, VIEWER)

ACTIONS = (
    'can_create',
    'can_edit',
    'can_delete',
    'can_publish',
    'can_manage_users',
    'can_manage_settings',
    'can_view_analytics',
)

_ROLE_MATRIX = {
    ADMIN: set(ACTIONS),
    EDITOR: {'can_create', 'can_edit', 'can_publish', 'can_view_analytics'},
    VIEWER: set(),
}


def get_permissions(role):
    """Словарь action → bool для роли. Неизвестная роль не получает ничего."""
    allowed = _ROLE_MATRIX.get(role, set())
    return {action: action in allowed for action in ACTIONS}


def _is_authenticated(user):
    return user is not None and getattr(user, 'is_authenticated', False)


def can_perform_action(user, action):
    if not _is_authenticated(user):
        return False
    return get_permissions(user.role).get(action, False)


def _as_tuple(roles):
    if isinstance(roles, str):
        return (roles,)
    return tuple(roles)


def has_role(user, roles):
    if not _is_authenticated(user):
        return False
    return user.role in _as_tuple(roles)


def require_role(user, roles):
    """Бросает NotAuthenticated / PermissionDenied, если роль не подходит."""
    roles = _as_tuple(roles)
    if not _is_authenticated(user):
        raise NotAuthenticated('Authentication required')
    if user.role not in roles:
        raise PermissionDenied(
            f'Requires {" or ".join(roles)} role, but user has {user.role} role'
        )
