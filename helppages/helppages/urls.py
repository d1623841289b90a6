"""
URL configuration for the HelpPages project.

    /api/...      — JSON API (DRF)
    /metrics/     — Prometheus
    /admin/       — Django admin
    /             — публичный сайт документации
"""
from django.contrib import admin
from django.urls import include, path

from .health import db_health_check, health_check, ready_check
from .prometheus_metrics import metrics_view

urlpatterns = [
    path('admin/', admin.site.urls),

    # Health checks
    path('api/health/', health_check, name='health'),
    path('api/health/ready/', ready_check, name='health-ready'),
    path('api/health/db/', db_health_check, name='health-db'),

    # API
    path('api/', include('accounts.urls')),
    path('api/', include('documentation.urls')),
    path('api/', include('pages.urls')),
    path('api/', include('analytics.urls')),

    # Prometheus metrics
    path('metrics/', metrics_view, name='prometheus-metrics'),

    # Публичный сайт
    path('', include('pages.public_urls')),
]
