# services/studio-calendar-service/src/apps/core/models/calendar_block.py
"""
Calendar Block Model

Time ranges during which a room cannot be booked.
"""

from django.db import models
from django.db.models import Q

from shared.common.mixins import UUIDPrimaryKeyMixin, TimestampMixin


class CalendarBlock(UUIDPrimaryKeyMixin, TimestampMixin):
    """
    A manual block or a confirmed reservation on a room's calendar.

    Manual blocks always block the room. Reservation blocks block until they
    are cancelled.
    """

    class BlockType(models.TextChoices):
        MANUAL_BLOCK = 'manual_block', 'Manual Block'
        RESERVATION = 'reservation', 'Reservation'

    class Status(models.TextChoices):
        APPROVED = 'approved', 'Approved'
        CANCELLED = 'cancelled', 'Cancelled'

    studio = models.ForeignKey(
        'core.Studio',
        on_delete=models.CASCADE,
        related_name='calendar_blocks'
    )
    room = models.ForeignKey(
        'core.Room',
        on_delete=models.CASCADE,
        related_name='calendar_blocks'
    )

    # Time range
    start_at = models.DateTimeField(db_index=True)
    end_at = models.DateTimeField(db_index=True)

    type = models.CharField(
        max_length=20,
        choices=BlockType.choices,
        default=BlockType.MANUAL_BLOCK
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        blank=True,
        null=True
    )

    title = models.CharField(max_length=200, blank=True, default='')
    note = models.TextField(blank=True, default='')

    created_by = models.UUIDField(blank=True, null=True)

    class Meta:
        db_table = 'studio_calendar_blocks'
        ordering = ['start_at']
        indexes = [
            models.Index(fields=['room', 'start_at', 'end_at']),
            models.Index(fields=['studio', 'start_at']),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(end_at__gt=models.F('start_at')),
                name='valid_calendar_block_times'
            ),
        ]

    def __str__(self):
        return f"{self.get_type_display()}: {self.start_at:%Y-%m-%d %H:%M} - {self.end_at:%H:%M}"

    @property
    def duration_minutes(self) -> int:
        return int((self.end_at - self.start_at).total_seconds() // 60)

    @property
    def is_blocking(self) -> bool:
        if self.type == self.BlockType.MANUAL_BLOCK:
            return True
        return self.status != self.Status.CANCELLED

    def cancel(self):
        """Release a reservation block."""
        if self.type != self.BlockType.RESERVATION:
            raise ValueError("Only reservation blocks can be cancelled")

        self.status = self.Status.CANCELLED
        self.save(update_fields=['status', 'updated_at'])

    # ==========================================================================
    # Class Methods
    # ==========================================================================

    @classmethod
    def blocking_q(cls) -> Q:
        """Filter matching blocks that occupy their room."""
        return Q(type=cls.BlockType.MANUAL_BLOCK) | (
            Q(type=cls.BlockType.RESERVATION) & ~Q(status=cls.Status.CANCELLED)
        )

    @classmethod
    def get_conflicts(cls, room_id, start, end, exclude_block_id=None):
        """Find blocking entries of a room overlapping [start, end)."""
        queryset = cls.objects.filter(room_id=room_id).filter(
            cls.blocking_q()
        ).filter(
            Q(start_at__lt=end) & Q(end_at__gt=start)
        )

        if exclude_block_id:
            queryset = queryset.exclude(id=exclude_block_id)

        return queryset

    @classmethod
    def get_in_range(cls, studio_id, start, end, room_ids=None):
        """Blocks of a studio intersecting [start, end)."""
        queryset = cls.objects.filter(
            studio_id=studio_id,
            start_at__lt=end,
            end_at__gt=start,
        )

        if room_ids:
            queryset = queryset.filter(room_id__in=room_ids)

        return queryset
