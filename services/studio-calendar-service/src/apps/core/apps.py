# services/studio-calendar-service/src/apps/core/apps.py
from django.apps import AppConfig
from django.db.models.signals import post_migrate


class CoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.core'
    verbose_name = 'Studio Calendar Core'

    def ready(self):
        """Import signals when app is ready."""
        from . import signals  # noqa: F401
        from .services.block_guard import install_overlap_constraint

        post_migrate.connect(install_overlap_constraint, sender=self)
