# services/studio-calendar-service/src/apps/core/signals.py
"""
Django Signals for Studio Calendar Service

Publishes calendar block events and keeps the occupancy summary cache fresh.
"""

import copy
import logging

from django.db import transaction
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver

from .models import CalendarBlock
from .events import publish_calendar_block_changed
from .services.occupancy_service import invalidate_summary

logger = logging.getLogger(__name__)


# ==========================================================================
# Calendar Block Signals
# ==========================================================================

@receiver(post_save, sender=CalendarBlock)
def calendar_block_post_save(sender, instance, created, **kwargs):
    """Handle calendar block post-save events."""
    invalidate_summary(instance.studio_id)

    if created:
        transaction.on_commit(lambda: publish_calendar_block_changed(instance, 'created'))
        logger.info(f"Calendar block created: {instance.id} ({instance.type})")


@receiver(post_delete, sender=CalendarBlock)
def calendar_block_post_delete(sender, instance, **kwargs):
    """Handle calendar block deletion events."""
    invalidate_summary(instance.studio_id)

    # Django clears the primary key once the delete finishes
    snapshot = copy.copy(instance)
    transaction.on_commit(lambda: publish_calendar_block_changed(snapshot, 'deleted'))
    logger.info(f"Calendar block deleted: {instance.id}")
