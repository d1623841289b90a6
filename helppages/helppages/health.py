"""
Health Check Endpoints for Monitoring
=====================================
Используются системой мониторинга и оркестратором.

/api/health/        — liveness + базовые проверки
/api/health/ready/  — readiness probe
/api/health/db/     — состояние БД с подсказками по починке
"""
import logging
import time

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import connection
from django.http import JsonResponse

logger = logging.getLogger(__name__)

DB_SUGGESTIONS = [
    'Check that the database server is running and reachable',
    'Verify DB_ENGINE, DB_NAME, DB_USER, DB_PASSWORD, DB_HOST and DB_PORT',
    'Run "python manage.py migrate" to create missing tables',
]


def health_check(request):
    """
    Health check endpoint для мониторинга.

    Возвращает:
    - 200 если всё работает
    - 500 если есть критические проблемы
    """
    status = {
        'status': 'healthy',
        'timestamp': time.time(),
        'version': getattr(settings, 'VERSION', '1.0.0'),
        'checks': {}
    }

    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
            cursor.fetchone()
        status['checks']['database'] = 'ok'
    except Exception as e:
        status['status'] = 'unhealthy'
        status['checks']['database'] = f'error: {str(e)[:100]}'

    missing = [name for name in ('SECRET_KEY', 'ALLOWED_HOSTS', 'HELPPAGES_BASE_DOMAIN')
               if not hasattr(settings, name)]
    if missing:
        status['status'] = 'unhealthy'
        status['checks']['settings'] = f'missing: {", ".join(missing)}'
    else:
        status['checks']['settings'] = 'ok'

    http_status = 200 if status['status'] == 'healthy' else 500
    return JsonResponse(status, status=http_status)


def ready_check(request):
    """
    Readiness probe - проверяет готовность приложения обслуживать запросы.
    """
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
        return JsonResponse({'ready': True})
    except Exception:
        return JsonResponse({'ready': False}, status=503)


def db_health_check(request):
    """
    Проверка БД: реальный запрос к таблице пользователей.

    При ошибке отдаём 500 с текстом ошибки и подсказками,
    что проверить в конфигурации.
    """
    try:
        user_count = get_user_model().objects.count()
    except Exception as e:
        logger.error('Database health check failed: %s', e)
        return JsonResponse({
            'status': 'error',
            'database': 'disconnected',
            'error': str(e)[:200],
            'suggestions': DB_SUGGESTIONS,
        }, status=500)

    return JsonResponse({
        'status': 'ok',
        'database': 'connected',
        'user_count': user_count,
        'engine': connection.vendor,
    })
