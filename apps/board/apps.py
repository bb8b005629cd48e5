# apps/board/apps.py

from django.apps import AppConfig


class BoardConfig(AppConfig):
    """Board app configuration"""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.board'
    verbose_name = 'Board - sprints and tasks'
