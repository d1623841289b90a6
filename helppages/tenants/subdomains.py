"""
Разбор хоста на субдомен пользователя и сборка публичных URL.

    anna.helppages.ai      → 'anna'
    helppages.ai           → None (основной домен)
    www.helppages.ai       → None
    api.helppages.ai       → None (служебные метки игнорируются)
    localhost              → None (≤ 2 меток)
"""
from django.conf import settings


def normalize_host(host):
    """Хост без порта в нижнем регистре."""
    return (host or '').split(':')[0].strip().lower()


def is_main_domain(host):
    host = normalize_host(host)
    base = settings.HELPPAGES_BASE_DOMAIN
    if host in settings.PLATFORM_DOMAINS or host in (base, f'www.{base}'):
        return True
    return len(host.split('.')) <= 2


def extract_subdomain(host):
    """Первая метка хоста либо None для основного домена."""
    host = normalize_host(host)
    if not host or is_main_domain(host):
        return None
    label = host.split('.')[0]
    if label in settings.SUBDOMAIN_IGNORED_LABELS:
        return None
    return label


def subdomain_url(username, path=''):
    """https://<username>.<base>/<path>, в DEBUG — http."""
    scheme = 'http' if settings.DEBUG else 'https'
    if path and not path.startswith('/'):
        path = f'/{path}'
    return f'{scheme}://{username}.{settings.HELPPAGES_BASE_DOMAIN}{path}'
