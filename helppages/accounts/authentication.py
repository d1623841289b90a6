"""
Аутентификация внешнего API по заголовку X-API-Key.

Подключается на уровне views (/api/v1/), а не глобально:
остальной API работает с JWT и сессией.
"""
import logging

from django.utils import timezone
from rest_framework import authentication, exceptions

from .models import ApiKey

logger = logging.getLogger(__name__)


class ApiKeyAuthentication(authentication.BaseAuthentication):
    header = 'HTTP_X_API_KEY'

    def authenticate(self, request):
        raw_key = request.META.get(self.header, '').strip()
        if not raw_key:
            return None

        try:
            api_key = ApiKey.objects.select_related('user').get(key=raw_key)
        except ApiKey.DoesNotExist:
            logger.warning('Unknown API key used: %s…', raw_key[:7])
            raise exceptions.AuthenticationFailed('Invalid API key')

        if api_key.is_expired:
            raise exceptions.AuthenticationFailed('API key has expired')
        if not api_key.user.is_active:
            raise exceptions.AuthenticationFailed('User is inactive')

        ApiKey.objects.filter(pk=api_key.pk).update(last_used_at=timezone.now())
        return api_key.user, api_key

    def authenticate_header(self, request):
        return 'X-API-Key'
