from django.apps import AppConfig


class DocumentationConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'documentation'
    verbose_name = 'Документации'
