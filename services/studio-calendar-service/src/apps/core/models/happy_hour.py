# services/studio-calendar-service/src/apps/core/models/happy_hour.py
"""
Happy Hour Models

Discounted pricing windows for rooms.
"""

from django.db import models
from django.db.models import Q

from shared.common.mixins import UUIDPrimaryKeyMixin, TimestampMixin


class HappyHourRule(UUIDPrimaryKeyMixin, TimestampMixin):
    """
    Weekly recurring happy-hour window for a room.

    Offsets are minutes from the start of the business day, so a window may
    end past 1440 when it runs overnight.
    """

    WEEKDAY_CHOICES = [
        (0, 'Monday'),
        (1, 'Tuesday'),
        (2, 'Wednesday'),
        (3, 'Thursday'),
        (4, 'Friday'),
        (5, 'Saturday'),
        (6, 'Sunday'),
    ]

    room = models.ForeignKey(
        'core.Room',
        on_delete=models.CASCADE,
        related_name='happy_hour_rules'
    )
    weekday = models.PositiveSmallIntegerField(choices=WEEKDAY_CHOICES)
    start_minutes = models.PositiveIntegerField()
    end_minutes = models.PositiveIntegerField()

    created_by = models.UUIDField(blank=True, null=True)

    class Meta:
        db_table = 'studio_happy_hour_rules'
        ordering = ['weekday', 'start_minutes']
        constraints = [
            models.UniqueConstraint(
                fields=['room', 'weekday', 'start_minutes'],
                name='unique_happy_hour_rule_start'
            ),
            models.CheckConstraint(
                condition=Q(end_minutes__gt=models.F('start_minutes')),
                name='valid_happy_hour_rule_window'
            ),
            models.CheckConstraint(
                condition=Q(weekday__lte=6),
                name='valid_happy_hour_rule_weekday'
            ),
        ]

    def __str__(self):
        return f"{self.get_weekday_display()} +{self.start_minutes}..{self.end_minutes}"

    @property
    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes


class HappyHourSlot(UUIDPrimaryKeyMixin, TimestampMixin):
    """Concrete happy-hour instance; legacy form of a recurring rule."""

    room = models.ForeignKey(
        'core.Room',
        on_delete=models.CASCADE,
        related_name='happy_hour_slots'
    )
    start_at = models.DateTimeField()
    end_at = models.DateTimeField()

    created_by = models.UUIDField(blank=True, null=True)

    class Meta:
        db_table = 'studio_happy_hour_slots'
        ordering = ['start_at']
        constraints = [
            models.CheckConstraint(
                condition=Q(end_at__gt=models.F('start_at')),
                name='valid_happy_hour_slot_times'
            ),
        ]

    def __str__(self):
        return f"Happy hour {self.start_at:%Y-%m-%d %H:%M} - {self.end_at:%H:%M}"
