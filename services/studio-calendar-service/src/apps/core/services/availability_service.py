# services/studio-calendar-service/src/apps/core/services/availability_service.py
"""
Availability Service

Overlap detection for room time ranges and room availability search.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from django.db.models import Q

from apps.core.models import CalendarBlock, CalendarSettings, ReservationRequest, Room

from .opening_hours import effective_opening_hours, is_within_opening_hours

logger = logging.getLogger(__name__)

MANUAL_BLOCK_TYPES = ('manual', 'manuel', 'block', 'blok')
RESERVATION_TYPES = ('reservation', 'rezervasyon')
RELEASED_STATUSES = ('cancelled', 'canceled', 'rejected')


def is_blocking(entry) -> bool:
    """
    Whether a calendar entry occupies its room.

    Manual blocks always do. Reservation blocks do until cancelled and
    reservation requests do while pending or approved. Anything else does not.
    """
    if isinstance(entry, ReservationRequest):
        return entry.status in ReservationRequest.get_active_statuses()

    entry_type = (getattr(entry, 'type', None) or '').lower()
    status = (getattr(entry, 'status', None) or '').lower()

    if any(marker in entry_type for marker in MANUAL_BLOCK_TYPES):
        return True
    if entry_type not in RESERVATION_TYPES:
        return False
    return status not in RELEASED_STATUSES


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Half-open interval overlap; touching endpoints do not overlap."""
    return a_start < b_end and a_end > b_start


class AvailabilityService:
    """
    Service for room availability.

    Every check that precedes an insert must run inside the inserting
    transaction after ``lock_room``.
    """

    def lock_room(self, room_id) -> Room:
        """Take a row lock on the room for the rest of the transaction."""
        return Room.objects.select_for_update().get(id=room_id)

    def has_conflict(
        self,
        room_id,
        start: datetime,
        end: datetime,
        exclude_block_id=None,
        exclude_request_id=None,
        include_requests: bool = True
    ) -> bool:
        """True when a blocking entry of the room overlaps [start, end)."""
        if CalendarBlock.get_conflicts(
            room_id, start, end, exclude_block_id=exclude_block_id
        ).exists():
            return True

        if not include_requests:
            return False

        return ReservationRequest.get_conflicts(
            room_id, start, end, exclude_request_id=exclude_request_id
        ).exists()

    def find_conflicts(
        self,
        room_id,
        start: datetime,
        end: datetime,
        exclude_block_id=None,
        exclude_request_id=None,
        include_requests: bool = True
    ) -> List[Dict[str, Any]]:
        """Describe every blocking entry of the room overlapping [start, end)."""
        conflicts = []

        blocks = CalendarBlock.get_conflicts(
            room_id, start, end, exclude_block_id=exclude_block_id
        )
        for block in blocks:
            conflicts.append({
                'kind': 'calendar_block',
                'id': str(block.id),
                'type': block.type,
                'start_at': block.start_at.isoformat(),
                'end_at': block.end_at.isoformat(),
                'message': f"Room blocked from {block.start_at:%Y-%m-%d %H:%M} to {block.end_at:%H:%M}",
            })

        if include_requests:
            requests = ReservationRequest.get_conflicts(
                room_id, start, end, exclude_request_id=exclude_request_id
            )
            for request in requests:
                conflicts.append({
                    'kind': 'reservation_request',
                    'id': str(request.id),
                    'status': request.status,
                    'start_at': request.start_at.isoformat(),
                    'end_at': request.end_at.isoformat(),
                    'message': f"Existing {request.status} request from {request.start_at:%Y-%m-%d %H:%M}",
                })

        return conflicts

    def find_available_rooms(
        self,
        start: datetime,
        end: datetime,
        city: Optional[str] = None,
        district: Optional[str] = None
    ) -> List[Room]:
        """
        Active rooms that are open for the whole window and not booked.

        Each studio's own opening hours, cutoff and timezone apply.
        """
        rooms = Room.objects.filter(
            is_active=True,
            studio__is_active=True,
        ).select_related('studio')

        if city:
            rooms = rooms.filter(studio__city__iexact=city)
        if district:
            rooms = rooms.filter(studio__district__iexact=district)

        busy_room_ids = set(
            CalendarBlock.objects.filter(
                CalendarBlock.blocking_q(),
                Q(start_at__lt=end) & Q(end_at__gt=start),
            ).values_list('room_id', flat=True)
        )
        busy_room_ids.update(
            ReservationRequest.objects.filter(
                status__in=ReservationRequest.get_active_statuses(),
                start_at__lt=end,
                end_at__gt=start,
            ).values_list('room_id', flat=True)
        )

        settings_by_studio = {
            item.studio_id: item
            for item in CalendarSettings.objects.filter(
                studio_id__in={room.studio_id for room in rooms}
            )
        }

        available = []
        for room in rooms:
            if room.id in busy_room_ids:
                continue

            calendar_settings = settings_by_studio.get(room.studio_id)
            if calendar_settings is None:
                calendar_settings = CalendarSettings(studio=room.studio)
            hours = effective_opening_hours(room.studio, calendar_settings)

            if is_within_opening_hours(
                start,
                end,
                hours,
                calendar_settings.day_cutoff_hour,
                calendar_settings.timezone
            ):
                available.append(room)

        logger.debug(f"Availability search {start} - {end}: {len(available)} rooms")
        return available
