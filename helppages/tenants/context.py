"""
Tenant context — хранение текущего субдомена и его владельца.
Используется middleware для установки, сервисами и Celery-задачами для чтения.

Использует contextvars (async-safe) вместо threading.local.
"""
import contextvars

_current_subdomain: contextvars.ContextVar = contextvars.ContextVar(
    'current_subdomain', default=None
)
_current_tenant_user: contextvars.ContextVar = contextvars.ContextVar(
    'current_tenant_user', default=None
)


def set_current_tenant(subdomain, tenant_user):
    """Установить текущий субдомен и его владельца в context."""
    _current_subdomain.set(subdomain)
    _current_tenant_user.set(tenant_user)


def get_current_subdomain():
    return _current_subdomain.get()


def get_current_tenant_user():
    """Владелец текущего субдомена. None на основном домене."""
    return _current_tenant_user.get()


def clear_current_tenant():
    _current_subdomain.set(None)
    _current_tenant_user.set(None)
