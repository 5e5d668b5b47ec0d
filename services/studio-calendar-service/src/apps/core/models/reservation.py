# services/studio-calendar-service/src/apps/core/models/reservation.py
"""
Reservation Request Model

Booking requests submitted by customers and decided by the studio owner.
"""

import uuid
from dataclasses import dataclass
from typing import Union

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from shared.common.mixins import UUIDPrimaryKeyMixin, TimestampMixin


@dataclass(frozen=True)
class Pending:
    """Awaiting the owner's decision."""


@dataclass(frozen=True)
class Approved:
    """Approved and holding a calendar block."""
    block_id: uuid.UUID


@dataclass(frozen=True)
class Rejected:
    """Declined by the owner."""


ReservationState = Union[Pending, Approved, Rejected]


class ReservationRequest(UUIDPrimaryKeyMixin, TimestampMixin):
    """
    Reservation request for a room.

    Starts pending (or approved straight away under automatic approval) and
    moves exactly once to approved or rejected. An approved request always
    links the calendar block it created.
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        APPROVED = 'approved', 'Approved'
        REJECTED = 'rejected', 'Rejected'

    studio = models.ForeignKey(
        'core.Studio',
        on_delete=models.CASCADE,
        related_name='reservation_requests'
    )
    room = models.ForeignKey(
        'core.Room',
        on_delete=models.CASCADE,
        related_name='reservation_requests'
    )

    # Requester
    requester_id = models.UUIDField(blank=True, null=True, db_index=True)
    requester_name = models.CharField(max_length=120)
    requester_phone = models.CharField(max_length=40)
    requester_email = models.EmailField(blank=True, null=True)
    note = models.TextField(max_length=500, blank=True, null=True)

    # Time window
    start_at = models.DateTimeField(db_index=True)
    end_at = models.DateTimeField()
    hours = models.PositiveSmallIntegerField()

    # Price
    total_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        blank=True,
        null=True
    )
    currency = models.CharField(
        max_length=3,
        default=settings.RESERVATION_CURRENCY
    )

    # Workflow
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True
    )
    calendar_block = models.OneToOneField(
        'core.CalendarBlock',
        on_delete=models.PROTECT,
        blank=True,
        null=True,
        related_name='reservation_request'
    )
    decided_by = models.UUIDField(blank=True, null=True)
    decided_at = models.DateTimeField(blank=True, null=True)

    # Inbox flags
    studio_unread = models.BooleanField(default=True)
    user_unread = models.BooleanField(default=False)

    class Meta:
        db_table = 'studio_reservation_requests'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['room', 'start_at', 'end_at']),
            models.Index(fields=['studio', 'status']),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(end_at__gt=models.F('start_at')),
                name='valid_reservation_request_times'
            ),
            models.CheckConstraint(
                condition=(
                    Q(status='approved', calendar_block__isnull=False)
                    | (~Q(status='approved') & Q(calendar_block__isnull=True))
                ),
                name='approved_reservation_has_block'
            ),
        ]

    def __str__(self):
        return f"{self.requester_name}: {self.start_at:%Y-%m-%d %H:%M} ({self.status})"

    # ==========================================================================
    # Properties
    # ==========================================================================

    @property
    def state(self) -> ReservationState:
        if self.status == self.Status.APPROVED:
            return Approved(block_id=self.calendar_block_id)
        if self.status == self.Status.REJECTED:
            return Rejected()
        return Pending()

    @property
    def is_pending(self) -> bool:
        return self.status == self.Status.PENDING

    @property
    def is_terminal(self) -> bool:
        return self.status in [self.Status.APPROVED, self.Status.REJECTED]

    # ==========================================================================
    # Status Transitions
    # ==========================================================================

    def approve(self, block, decided_by: uuid.UUID = None):
        """Approve the request, linking the block that reserves its slot."""
        if not self.is_pending:
            raise ValueError(f"Cannot approve request in {self.status} status")
        if block is None:
            raise ValueError("An approved request requires a calendar block")

        self.status = self.Status.APPROVED
        self.calendar_block = block
        self.decided_by = decided_by
        self.decided_at = timezone.now()
        self.studio_unread = False
        self.user_unread = True
        self.save(update_fields=[
            'status', 'calendar_block', 'decided_by', 'decided_at',
            'studio_unread', 'user_unread', 'updated_at',
        ])

    def reject(self, decided_by: uuid.UUID = None):
        """Reject the request."""
        if not self.is_pending:
            raise ValueError(f"Cannot reject request in {self.status} status")

        self.status = self.Status.REJECTED
        self.decided_by = decided_by
        self.decided_at = timezone.now()
        self.studio_unread = False
        self.user_unread = True
        self.save(update_fields=[
            'status', 'decided_by', 'decided_at',
            'studio_unread', 'user_unread', 'updated_at',
        ])

    # ==========================================================================
    # Class Methods
    # ==========================================================================

    @classmethod
    def get_active_statuses(cls) -> list:
        """Statuses that hold their time slot."""
        return [cls.Status.PENDING, cls.Status.APPROVED]

    @classmethod
    def get_conflicts(cls, room_id, start, end, exclude_request_id=None):
        """Find active requests of a room overlapping [start, end)."""
        queryset = cls.objects.filter(
            room_id=room_id,
            status__in=cls.get_active_statuses()
        ).filter(
            Q(start_at__lt=end) & Q(end_at__gt=start)
        )

        if exclude_request_id:
            queryset = queryset.exclude(id=exclude_request_id)

        return queryset
