# services/studio-calendar-service/src/apps/core/services/calendar_service.py
"""
Calendar Service

Studio calendar settings, manual blocks and the combined calendar view.
"""

import uuid
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from django.db import transaction

from apps.core.models import CalendarBlock, CalendarSettings, ReservationRequest, Room

from .availability_service import AvailabilityService
from .block_guard import guard_overlap
from .clock import get_zone
from .exceptions import (
    BookingConflictError,
    BookingStateError,
    BookingValidationError,
    NotFoundError,
    ScheduleConflictError,
)
from .happy_hour_service import HappyHourService
from .occupancy_service import OccupancyService, invalidate_summary
from .opening_hours import effective_opening_hours, is_within_opening_hours, validate
from .ownership import actor_uuid, get_room, require_owner

logger = logging.getLogger(__name__)

MAX_RANGE_DAYS = 62

SETTINGS_FIELDS = (
    'day_cutoff_hour',
    'timezone',
    'weekly_hours',
    'slot_step_minutes',
    'happy_hour_enabled',
    'booking_approval_mode',
    'booking_cutoff_value',
    'booking_cutoff_unit',
)


class CalendarService:
    """
    Service for the studio owner's calendar.

    Handles:
    - Calendar settings
    - Manual blocks (create / update / delete)
    - Calendar listing with expanded happy hours
    """

    def __init__(self, availability_service=None, happy_hour_service=None, occupancy_service=None):
        self.availability_service = availability_service or AvailabilityService()
        self.happy_hour_service = happy_hour_service or HappyHourService()
        self.occupancy_service = occupancy_service or OccupancyService(self.happy_hour_service)

    # ==========================================================================
    # Settings
    # ==========================================================================

    def get_settings(self, studio) -> CalendarSettings:
        return CalendarSettings.for_studio(studio)

    def update_settings(self, studio, **fields) -> CalendarSettings:
        """Upsert the studio's settings after validating the given fields."""
        unknown = set(fields) - set(SETTINGS_FIELDS)
        if unknown:
            raise BookingValidationError(f"Unknown settings: {', '.join(sorted(unknown))}")

        cleaned = self._validate_settings(fields)

        calendar_settings, created = CalendarSettings.objects.get_or_create(studio=studio)
        for field, value in cleaned.items():
            setattr(calendar_settings, field, value)
        calendar_settings.save()

        invalidate_summary(studio.id)
        logger.info(
            f"Calendar settings {'created' if created else 'updated'} for studio {studio.id}: "
            f"{', '.join(sorted(cleaned)) or 'no changes'}"
        )
        return calendar_settings

    def _validate_settings(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        cleaned = dict(fields)

        if 'timezone' in cleaned:
            get_zone(cleaned['timezone'])

        if 'day_cutoff_hour' in cleaned:
            cutoff = cleaned['day_cutoff_hour']
            if isinstance(cutoff, bool) or not isinstance(cutoff, int) or not 0 <= cutoff <= 23:
                raise BookingValidationError("Day cutoff hour must be between 0 and 23")

        if 'slot_step_minutes' in cleaned:
            if cleaned['slot_step_minutes'] not in CalendarSettings.SLOT_STEP_CHOICES:
                raise BookingValidationError(
                    f"Slot step must be one of {CalendarSettings.SLOT_STEP_CHOICES}"
                )

        if 'booking_cutoff_value' in cleaned:
            value = cleaned['booking_cutoff_value']
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise BookingValidationError("Booking cutoff must be a non-negative integer")

        if 'booking_approval_mode' in cleaned:
            if cleaned['booking_approval_mode'] not in CalendarSettings.ApprovalMode.values:
                raise BookingValidationError("Invalid approval mode")

        if 'booking_cutoff_unit' in cleaned:
            if cleaned['booking_cutoff_unit'] not in CalendarSettings.CutoffUnit.values:
                raise BookingValidationError("Invalid cutoff unit")

        if cleaned.get('weekly_hours'):
            cleaned['weekly_hours'] = validate(cleaned['weekly_hours'])
        elif 'weekly_hours' in cleaned:
            cleaned['weekly_hours'] = None

        return cleaned

    # ==========================================================================
    # Calendar View
    # ==========================================================================

    def list_calendar_entries(
        self,
        studio,
        range_start: datetime,
        range_end: datetime,
        room_ids: Optional[List[uuid.UUID]] = None,
        include_blocks: bool = True,
        include_happy_hours: bool = True,
        include_summary: bool = False
    ) -> Dict[str, Any]:
        """Blocks and expanded happy hours of the studio's rooms in a range."""
        if range_end <= range_start:
            raise BookingValidationError("Range end must be after range start")
        if range_end - range_start > timedelta(days=MAX_RANGE_DAYS):
            raise BookingValidationError(f"Range cannot exceed {MAX_RANGE_DAYS} days")

        rooms = list(Room.objects.filter(studio=studio, is_active=True))
        if room_ids:
            wanted = {str(room_id) for room_id in room_ids}
            known = {str(room.id) for room in rooms}
            missing = wanted - known
            if missing:
                raise NotFoundError(f"Rooms not found in studio: {', '.join(sorted(missing))}")
            rooms = [room for room in rooms if str(room.id) in wanted]

        calendar_settings = CalendarSettings.for_studio(studio)
        result: Dict[str, Any] = {'blocks': [], 'expanded_happy_hours': []}

        if include_blocks and rooms:
            result['blocks'] = list(
                CalendarBlock.get_in_range(
                    studio.id, range_start, range_end, room_ids=[room.id for room in rooms]
                ).select_related('reservation_request')
            )

        if include_happy_hours and rooms:
            result['expanded_happy_hours'] = self.happy_hour_service.expand_for_rooms(
                rooms, range_start, range_end, tz=calendar_settings.timezone
            )

        if include_summary:
            result['summary'] = self.occupancy_service.get_summary(studio)

        return result

    # ==========================================================================
    # Blocks
    # ==========================================================================

    def get_block(self, block_id: uuid.UUID) -> CalendarBlock:
        block = CalendarBlock.objects.select_related('studio', 'room').filter(id=block_id).first()
        if block is None:
            raise NotFoundError(f"Calendar block {block_id} not found")
        return block

    def _validate_block(self, studio, room, start_at, end_at, block_type, exclude_block_id=None):
        if not isinstance(start_at, datetime) or not isinstance(end_at, datetime):
            raise BookingValidationError("Start and end times are required")
        if end_at <= start_at:
            raise BookingValidationError("End time must be after start time")
        if block_type not in CalendarBlock.BlockType.values:
            raise BookingValidationError(f"Invalid block type: {block_type}")

        if block_type == CalendarBlock.BlockType.RESERVATION:
            calendar_settings = CalendarSettings.for_studio(studio)
            if not is_within_opening_hours(
                start_at,
                end_at,
                effective_opening_hours(studio, calendar_settings),
                calendar_settings.day_cutoff_hour,
                calendar_settings.timezone
            ):
                raise ScheduleConflictError("Reservation is outside the studio's opening hours")

        conflicts = self.availability_service.find_conflicts(
            room.id, start_at, end_at, exclude_block_id=exclude_block_id
        )
        if exclude_block_id:
            linked = ReservationRequest.objects.filter(calendar_block_id=exclude_block_id)
            linked_ids = {str(pk) for pk in linked.values_list('id', flat=True)}
            conflicts = [c for c in conflicts if c['id'] not in linked_ids]
        if conflicts:
            raise BookingConflictError("Block overlaps an existing booking", conflicts=conflicts)

    @transaction.atomic
    def create_block(
        self,
        studio,
        room_id: uuid.UUID,
        start_at: datetime,
        end_at: datetime,
        actor,
        type: str = CalendarBlock.BlockType.MANUAL_BLOCK,
        title: str = '',
        note: str = ''
    ) -> CalendarBlock:
        """Create a block on one of the owner's rooms."""
        require_owner(studio, actor)
        room = get_room(room_id, studio=studio)

        self.availability_service.lock_room(room.id)
        self._validate_block(studio, room, start_at, end_at, type)

        with guard_overlap():
            block = CalendarBlock.objects.create(
                studio=studio,
                room=room,
                start_at=start_at,
                end_at=end_at,
                type=type,
                status=CalendarBlock.Status.APPROVED if type == CalendarBlock.BlockType.RESERVATION else None,
                title=title or '',
                note=note or '',
                created_by=actor_uuid(actor),
            )

        logger.info(f"Calendar block {block.id} created for room {room.id}")
        return block

    @transaction.atomic
    def update_block(self, block_id: uuid.UUID, actor, **fields) -> CalendarBlock:
        """Move or relabel a block, re-running the overlap checks."""
        block = self.get_block(block_id)
        require_owner(block.studio, actor)

        if self._is_reserved(block):
            self._require_label_only(block, fields)

        room = block.room
        if 'room_id' in fields and str(fields['room_id']) != str(block.room_id):
            room = get_room(fields.pop('room_id'), studio=block.studio)
        else:
            fields.pop('room_id', None)

        start_at = fields.pop('start_at', block.start_at)
        end_at = fields.pop('end_at', block.end_at)
        block_type = fields.pop('type', block.type)

        self.availability_service.lock_room(room.id)
        self._validate_block(
            block.studio, room, start_at, end_at, block_type, exclude_block_id=block.id
        )

        block.room = room
        block.start_at = start_at
        block.end_at = end_at
        block.type = block_type
        for field in ('title', 'note'):
            if field in fields:
                setattr(block, field, fields[field] or '')
        if 'status' in fields:
            block.status = fields['status']
        with guard_overlap():
            block.save()

        logger.info(f"Calendar block {block.id} updated")
        return block

    def _is_reserved(self, block) -> bool:
        return ReservationRequest.objects.filter(
            calendar_block=block,
            status=ReservationRequest.Status.APPROVED
        ).exists()

    def _require_label_only(self, block, fields):
        """Blocks of approved reservations keep their room, window, type and status."""
        current = {
            'room_id': block.room_id,
            'start_at': block.start_at,
            'end_at': block.end_at,
            'type': block.type,
            'status': block.status,
        }
        changed = sorted(
            field for field, value in current.items()
            if field in fields and fields[field] != value and str(fields[field]) != str(value)
        )
        if changed:
            raise BookingStateError(
                f"Block belongs to an approved reservation; cannot change {', '.join(changed)}",
                details={'fields': changed}
            )

    @transaction.atomic
    def delete_block(self, block_id: uuid.UUID, actor):
        """Delete a manual block or an unlinked reservation block."""
        block = self.get_block(block_id)
        require_owner(block.studio, actor)

        if self._is_reserved(block):
            raise BookingStateError("Block belongs to an approved reservation")

        block.delete()

        logger.info(f"Calendar block {block_id} deleted")
