"""
Сигналы — инвалидация кеша SubdomainMiddleware при изменении пользователя.

Подключается через TenantsConfig.ready() в apps.py.
"""
import logging

from django.conf import settings
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

logger = logging.getLogger(__name__)


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def user_post_save(sender, instance, **kwargs):
    """username мог смениться — сбрасываем кеш субдоменов."""
    from .middleware import SubdomainMiddleware
    SubdomainMiddleware.clear_cache()
    logger.debug('Subdomain cache cleared after save: %s', instance.username)


@receiver(post_delete, sender=settings.AUTH_USER_MODEL)
def user_post_delete(sender, instance, **kwargs):
    from .middleware import SubdomainMiddleware
    SubdomainMiddleware.clear_cache()
    logger.debug('Subdomain cache cleared after delete: %s', instance.username)
