# services/studio-calendar-service/src/apps/core/services/block_guard.py
"""
Storage-level overlap guard for calendar blocks.

On PostgreSQL an exclusion constraint keeps two blocking rows of the same
room from overlapping, backing up the row lock taken by the services.
Other databases rely on the lock alone.
"""

import logging
from contextlib import contextmanager
from typing import List

from django.db import DEFAULT_DB_ALIAS, IntegrityError, connections, transaction

from apps.core.models import CalendarBlock

from .exceptions import BookingConflictError

logger = logging.getLogger(__name__)

OVERLAP_CONSTRAINT = 'calendar_block_no_overlap'


def overlap_constraint_sql() -> List[str]:
    """Statements installing the exclusion constraint, safe to re-run."""
    table = CalendarBlock._meta.db_table
    blocking = (
        f"type = '{CalendarBlock.BlockType.MANUAL_BLOCK.value}' "
        f"OR status IS DISTINCT FROM '{CalendarBlock.Status.CANCELLED.value}'"
    )
    return [
        'CREATE EXTENSION IF NOT EXISTS btree_gist',
        f'ALTER TABLE {table} DROP CONSTRAINT IF EXISTS {OVERLAP_CONSTRAINT}',
        (
            f'ALTER TABLE {table} ADD CONSTRAINT {OVERLAP_CONSTRAINT} '
            f"EXCLUDE USING gist (room_id WITH =, tstzrange(start_at, end_at, '[)') WITH &&) "
            f'WHERE ({blocking})'
        ),
    ]


def install_overlap_constraint(sender=None, using=DEFAULT_DB_ALIAS, **kwargs) -> bool:
    """post_migrate receiver; returns whether the constraint was installed."""
    connection = connections[using]
    if connection.vendor != 'postgresql':
        logger.debug(f"Skipping {OVERLAP_CONSTRAINT} on {connection.vendor}")
        return False

    with connection.cursor() as cursor:
        for statement in overlap_constraint_sql():
            cursor.execute(statement)

    logger.info(f"Installed {OVERLAP_CONSTRAINT} on {CalendarBlock._meta.db_table}")
    return True


@contextmanager
def guard_overlap(message: str = "Block overlaps an existing booking"):
    """Turn a violation of the overlap constraint into BookingConflictError."""
    try:
        with transaction.atomic():
            yield
    except IntegrityError as e:
        if OVERLAP_CONSTRAINT not in str(e):
            raise
        logger.warning(f"Overlap rejected by the database: {e}")
        raise BookingConflictError(message) from e
