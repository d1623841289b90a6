"""
Subdomain Middleware — определяет пользователя-владельца субдомена.

Логика:
  1. anna.helppages.ai  → request.subdomain='anna', request.tenant_user=User(username='anna')
  2. helppages.ai       → основной домен, subdomain=None
  3. localhost:3000     → X-Subdomain header (только DEV!) или основной домен

БЕЗОПАСНОСТЬ:
  - На не-локальных хостах X-Subdomain header ИГНОРИРУЕТСЯ.
    Только hostname определяет субдомен — подделать нельзя.

Также кладёт субдомен в contextvars для кода, где нет request.
"""

import logging
import time

from django.conf import settings as django_settings
from django.contrib.auth import get_user_model
from django.http import HttpResponsePermanentRedirect

from .context import clear_current_tenant, set_current_tenant
from .subdomains import extract_subdomain, is_main_domain, normalize_host

logger = logging.getLogger(__name__)

# Старые адреса кабинета на основном домене
LEGACY_REDIRECTS = (
    ('/cms/all-courses', '/cms'),
    ('/dashboard', '/cms'),
)


class SubdomainMiddleware:
    """
    Ставить в MIDDLEWARE ПОСЛЕ AuthenticationMiddleware.

    Ставит:
      - request.subdomain   = 'anna' или None
      - request.tenant_user = владелец субдомена или None
    """

    # Кэш пользователей: username → (user, timestamp)
    _user_cache = {}

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        host = normalize_host(request.get_host())

        redirect = self._legacy_redirect(request, host)
        if redirect is not None:
            return redirect

        subdomain = self._resolve_subdomain(request, host)
        tenant_user = self._get_user(subdomain) if subdomain else None
        request.subdomain = subdomain
        request.tenant_user = tenant_user
        set_current_tenant(subdomain, tenant_user)

        try:
            response = self.get_response(request)
        finally:
            clear_current_tenant()

        return response

    def _resolve_subdomain(self, request, host):
        header_value = request.META.get('HTTP_X_SUBDOMAIN', '').strip().lower()

        if host in django_settings.SUBDOMAIN_DEV_HOSTS:
            return header_value or None

        if header_value:
            logger.warning(
                'X-Subdomain header "%s" ignored for non-local host "%s" '
                '(subdomain is determined by hostname only)',
                header_value, host,
            )
        return extract_subdomain(host)

    def _legacy_redirect(self, request, host):
        if not is_main_domain(host):
            return None
        for old_prefix, target in LEGACY_REDIRECTS:
            if request.path == old_prefix or request.path.startswith(f'{old_prefix}/'):
                if old_prefix == '/dashboard':
                    # /dashboard/<rest> → /cms/<rest>
                    target += request.path[len(old_prefix):]
                query = request.META.get('QUERY_STRING', '')
                if query:
                    target = f'{target}?{query}'
                return HttpResponsePermanentRedirect(target)
        return None

    def _get_user(self, username):
        ttl = getattr(django_settings, 'SUBDOMAIN_CACHE_TTL', 300)
        cached = self._user_cache.get(username)
        if cached is not None:
            user, ts = cached
            if (time.monotonic() - ts) < ttl:
                return user
            del self._user_cache[username]

        user = get_user_model().objects.filter(username__iexact=username, is_active=True).first()
        if user is None:
            logger.info('No user for subdomain: %s', username)
        self._user_cache[username] = (user, time.monotonic())
        return user

    @classmethod
    def clear_cache(cls):
        """Очистить кэш (при изменении пользователя)."""
        cls._user_cache.clear()
