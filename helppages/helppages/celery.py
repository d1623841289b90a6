"""Celery application instance for HelpPages."""
import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "helppages.settings")

app = Celery("helppages")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()
