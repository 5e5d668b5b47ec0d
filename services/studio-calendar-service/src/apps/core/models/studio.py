# services/studio-calendar-service/src/apps/core/models/studio.py
"""
Studio Models

Studios, their rooms and per-studio calendar settings.
"""

from django.conf import settings
from django.db import models

from shared.common.mixins import UUIDPrimaryKeyMixin, TimestampMixin


class Studio(UUIDPrimaryKeyMixin, TimestampMixin):
    """A rentable studio owned by a single account."""

    name = models.CharField(max_length=200)

    # Owner
    owner_id = models.UUIDField(blank=True, null=True, db_index=True)
    owner_email = models.EmailField(db_index=True)

    # Location
    city = models.CharField(max_length=100, blank=True, default='')
    district = models.CharField(max_length=100, blank=True, default='')

    # Default weekly schedule, overridden by CalendarSettings.weekly_hours
    opening_hours = models.JSONField(blank=True, null=True)

    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = 'studios'
        ordering = ['name']
        indexes = [
            models.Index(fields=['city', 'district']),
        ]

    def __str__(self):
        return self.name

    def is_owned_by(self, user) -> bool:
        """Check whether an authenticated token user owns this studio."""
        if user is None or not getattr(user, 'is_authenticated', False):
            return False

        user_id = getattr(user, 'id', None)
        if self.owner_id and user_id and str(self.owner_id) == str(user_id):
            return True

        email = (getattr(user, 'email', None) or '').strip().lower()
        return bool(email) and email == (self.owner_email or '').strip().lower()


class Room(UUIDPrimaryKeyMixin, TimestampMixin):
    """
    A bookable room inside a studio.

    Rates are stored as the owner typed them ("1.500 TL", "750,50") and are
    normalized by the pricing service before use.
    """

    studio = models.ForeignKey(
        Studio,
        on_delete=models.CASCADE,
        related_name='rooms'
    )
    name = models.CharField(max_length=200)

    # Pricing (free text)
    hourly_rate = models.CharField(max_length=50, blank=True, null=True)
    min_rate = models.CharField(max_length=50, blank=True, null=True)
    flat_rate = models.CharField(max_length=50, blank=True, null=True)
    happy_hour_rate = models.CharField(max_length=50, blank=True, null=True)
    daily_rate = models.CharField(max_length=50, blank=True, null=True)

    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = 'studio_rooms'
        ordering = ['name']

    def __str__(self):
        return f"{self.studio.name} / {self.name}"


class CalendarSettings(UUIDPrimaryKeyMixin, TimestampMixin):
    """Calendar configuration, one row per studio."""

    class ApprovalMode(models.TextChoices):
        MANUAL = 'manual', 'Manual'
        AUTO = 'auto', 'Automatic'

    class CutoffUnit(models.TextChoices):
        HOURS = 'hours', 'Hours'
        DAYS = 'days', 'Days'

    SLOT_STEP_CHOICES = [30, 60, 90, 120]

    studio = models.OneToOneField(
        Studio,
        on_delete=models.CASCADE,
        related_name='calendar_settings'
    )

    # Business day
    day_cutoff_hour = models.PositiveSmallIntegerField(
        default=settings.CALENDAR_DEFAULT_CUTOFF_HOUR
    )
    timezone = models.CharField(
        max_length=64,
        default=settings.CALENDAR_DEFAULT_TIMEZONE
    )
    weekly_hours = models.JSONField(blank=True, null=True)
    slot_step_minutes = models.PositiveSmallIntegerField(default=60)

    # Pricing
    happy_hour_enabled = models.BooleanField(default=False)

    # Approval
    booking_approval_mode = models.CharField(
        max_length=20,
        choices=ApprovalMode.choices,
        default=ApprovalMode.MANUAL
    )
    booking_cutoff_value = models.PositiveIntegerField(default=0)
    booking_cutoff_unit = models.CharField(
        max_length=10,
        choices=CutoffUnit.choices,
        default=CutoffUnit.HOURS
    )

    class Meta:
        db_table = 'studio_calendar_settings'
        constraints = [
            models.CheckConstraint(
                condition=models.Q(day_cutoff_hour__lte=23),
                name='valid_day_cutoff_hour'
            ),
        ]

    def __str__(self):
        return f"Calendar settings for {self.studio_id}"

    @classmethod
    def for_studio(cls, studio) -> 'CalendarSettings':
        """Stored settings of the studio, or unsaved defaults."""
        existing = cls.objects.filter(studio=studio).first()
        return existing if existing is not None else cls(studio=studio)

    @property
    def is_auto_approval(self) -> bool:
        return self.booking_approval_mode == self.ApprovalMode.AUTO

    @property
    def cutoff_minutes(self) -> int:
        """Minimum lead time for automatic approval, in minutes."""
        if self.booking_cutoff_unit == self.CutoffUnit.DAYS:
            return self.booking_cutoff_value * 24 * 60
        return self.booking_cutoff_value * 60
