# services/studio-calendar-service/src/apps/core/services/reservation_service.py
"""
Reservation Service

Reservation request workflow: creation, owner approval and rejection.
"""

import uuid
import logging
from datetime import datetime, timedelta
from typing import Optional

from django.db import transaction
from django.utils import timezone

from apps.core.models import CalendarBlock, CalendarSettings, ReservationRequest

from .availability_service import AvailabilityService
from .block_guard import guard_overlap
from .clock import zoned_parts
from .exceptions import (
    AuthorizationError,
    BookingConflictError,
    BookingStateError,
    BookingValidationError,
    NotFoundError,
    ScheduleConflictError,
)
from .opening_hours import effective_opening_hours, is_within_opening_hours
from .ownership import actor_uuid, get_room, get_studio, is_authenticated, require_owner
from .pricing_service import PricingService

logger = logging.getLogger(__name__)

MIN_HOURS = 1
MAX_HOURS = 24
NAME_LENGTH = (2, 120)
PHONE_LENGTH = (6, 40)


class ReservationService:
    """
    Service for reservation requests.

    Handles:
    - Request creation with opening-hour and conflict checks
    - Automatic approval inside the studio's cutoff window
    - Owner decisions (approve / reject)
    - Inbox flags
    """

    def __init__(self, availability_service=None, pricing_service=None):
        self.availability_service = availability_service or AvailabilityService()
        self.pricing_service = pricing_service or PricingService()

    # ==========================================================================
    # Creation
    # ==========================================================================

    def create(
        self,
        studio_id: uuid.UUID,
        room_id: uuid.UUID,
        start_at: datetime,
        hours: int,
        requester_name: str = None,
        requester_phone: str = None,
        requester_email: str = None,
        note: str = None,
        requester=None,
        now: datetime = None
    ) -> ReservationRequest:
        """
        Create a reservation request.

        The request is stored pending, or approved with its calendar block
        when the studio approves automatically and the requester qualifies.
        Nothing is written unless every check passes.
        """
        now = now or timezone.now()
        identity = self._resolve_identity(requester, requester_name, requester_phone, requester_email)
        self._validate_duration(hours)

        studio = get_studio(studio_id)
        room = get_room(room_id, studio=studio)
        calendar_settings = CalendarSettings.for_studio(studio)

        self._validate_alignment(start_at, calendar_settings.timezone)
        end_at = start_at + timedelta(hours=hours)

        self._require_opening_hours(studio, calendar_settings, start_at, end_at)

        auto_approve = calendar_settings.is_auto_approval
        if auto_approve:
            self._validate_auto_approval(requester, calendar_settings, start_at, now)

        total_price = self.pricing_service.price(room, calendar_settings, start_at, hours)

        with transaction.atomic():
            self.availability_service.lock_room(room.id)

            conflicts = self.availability_service.find_conflicts(room.id, start_at, end_at)
            if conflicts:
                raise BookingConflictError(
                    "Requested time overlaps an existing booking",
                    conflicts=conflicts
                )

            block = None
            if auto_approve:
                block = self._create_reservation_block(
                    studio, room, start_at, end_at, identity, requester_id=identity['id']
                )

            request = ReservationRequest.objects.create(
                studio=studio,
                room=room,
                requester_id=identity['id'],
                requester_name=identity['name'],
                requester_phone=identity['phone'],
                requester_email=identity['email'],
                note=(note or '').strip() or None,
                start_at=start_at,
                end_at=end_at,
                hours=hours,
                total_price=total_price,
                status=(
                    ReservationRequest.Status.APPROVED if block
                    else ReservationRequest.Status.PENDING
                ),
                calendar_block=block,
                decided_at=now if block else None,
                studio_unread=True,
                user_unread=bool(block),
            )

            logger.info(
                f"Reservation request {request.id} created for room {room.id} "
                f"({request.status})",
                extra={'studio_id': str(studio.id), 'room_id': str(room.id)}
            )

            transaction.on_commit(lambda: self._publish_created(request))

        return request

    def _resolve_identity(self, requester, name, phone, email) -> dict:
        authenticated = is_authenticated(requester)

        name = (name or (getattr(requester, 'name', None) if authenticated else None) or '').strip()
        phone = (phone or (getattr(requester, 'phone', None) if authenticated else None) or '').strip()
        email = (email or '').strip() or None

        if authenticated:
            email = getattr(requester, 'email', None) or email
        elif not email:
            raise BookingValidationError("Email is required when not signed in")

        if not NAME_LENGTH[0] <= len(name) <= NAME_LENGTH[1]:
            raise BookingValidationError(
                f"Name must be {NAME_LENGTH[0]} to {NAME_LENGTH[1]} characters"
            )
        if not phone:
            raise BookingValidationError("Phone number is required")
        if not PHONE_LENGTH[0] <= len(phone) <= PHONE_LENGTH[1]:
            raise BookingValidationError(
                f"Phone must be {PHONE_LENGTH[0]} to {PHONE_LENGTH[1]} characters"
            )

        return {
            'id': actor_uuid(requester),
            'name': name,
            'phone': phone,
            'email': email,
        }

    def _validate_duration(self, hours):
        if isinstance(hours, bool) or not isinstance(hours, int):
            raise BookingValidationError("Duration must be a whole number of hours")
        if hours < MIN_HOURS or hours > MAX_HOURS:
            raise BookingValidationError(
                f"Duration must be between {MIN_HOURS} and {MAX_HOURS} hours"
            )

    def _validate_alignment(self, start_at: datetime, tz):
        if not isinstance(start_at, datetime):
            raise BookingValidationError("Start time is required")

        parts = zoned_parts(start_at, tz)
        if parts.minute or parts.second or start_at.microsecond:
            raise BookingValidationError("Start time must be on the hour")

    def _require_opening_hours(self, studio, calendar_settings, start_at, end_at):
        hours = effective_opening_hours(studio, calendar_settings)
        if not is_within_opening_hours(
            start_at,
            end_at,
            hours,
            calendar_settings.day_cutoff_hour,
            calendar_settings.timezone
        ):
            raise ScheduleConflictError(
                "Requested time is outside the studio's opening hours",
                details={'start_at': start_at.isoformat(), 'end_at': end_at.isoformat()}
            )

    def _validate_auto_approval(self, requester, calendar_settings, start_at, now):
        if not is_authenticated(requester):
            raise AuthorizationError(
                "Sign in to book this studio instantly",
                requires_login=True
            )

        earliest = now + timedelta(minutes=calendar_settings.cutoff_minutes)
        if start_at < earliest:
            raise BookingValidationError(
                f"Bookings must start at least {calendar_settings.booking_cutoff_value} "
                f"{calendar_settings.booking_cutoff_unit} in advance",
                details={'earliest_start': earliest.isoformat()}
            )

    def _create_reservation_block(self, studio, room, start_at, end_at, identity, requester_id=None):
        contact = [f"Name: {identity['name']}", f"Phone: {identity['phone']}"]
        if identity['email']:
            contact.append(f"Email: {identity['email']}")

        with guard_overlap("The requested time is no longer free"):
            return CalendarBlock.objects.create(
                studio=studio,
                room=room,
                start_at=start_at,
                end_at=end_at,
                type=CalendarBlock.BlockType.RESERVATION,
                status=CalendarBlock.Status.APPROVED,
                title=f"Reservation - {identity['name']}",
                note='\n'.join(contact),
                created_by=requester_id,
            )

    # ==========================================================================
    # Decisions
    # ==========================================================================

    def approve(self, request_id: uuid.UUID, actor) -> ReservationRequest:
        """Approve a pending request and reserve its slot."""
        request = self.get_request(request_id)
        require_owner(request.studio, actor)

        if request.status == ReservationRequest.Status.APPROVED:
            return request
        if request.status == ReservationRequest.Status.REJECTED:
            raise BookingStateError("Request has already been rejected")

        with transaction.atomic():
            self.availability_service.lock_room(request.room_id)
            request.refresh_from_db()
            if request.status == ReservationRequest.Status.APPROVED:
                return request
            if not request.is_pending:
                raise BookingStateError(f"Cannot approve request in {request.status} status")

            calendar_settings = CalendarSettings.for_studio(request.studio)
            self._require_opening_hours(
                request.studio, calendar_settings, request.start_at, request.end_at
            )

            conflicts = self.availability_service.find_conflicts(
                request.room_id,
                request.start_at,
                request.end_at,
                exclude_request_id=request.id,
                include_requests=False,
            )
            if conflicts:
                raise BookingConflictError(
                    "The requested time is no longer free",
                    conflicts=conflicts
                )

            block = self._create_reservation_block(
                request.studio,
                request.room,
                request.start_at,
                request.end_at,
                {
                    'name': request.requester_name,
                    'phone': request.requester_phone,
                    'email': request.requester_email,
                },
                requester_id=request.requester_id,
            )

            try:
                request.approve(block, decided_by=actor_uuid(actor))
            except ValueError as e:
                raise BookingStateError(str(e))

            logger.info(f"Reservation request {request.id} approved, block {block.id}")

            actor_id = actor_uuid(actor)
            transaction.on_commit(lambda: self._publish_approved(request, actor_id))

        return request

    def reject(self, request_id: uuid.UUID, actor) -> ReservationRequest:
        """Reject a pending request."""
        request = self.get_request(request_id)
        require_owner(request.studio, actor)

        if request.status == ReservationRequest.Status.REJECTED:
            return request
        if request.status == ReservationRequest.Status.APPROVED:
            raise BookingStateError("Request has already been approved")

        with transaction.atomic():
            self.availability_service.lock_room(request.room_id)
            request.refresh_from_db()
            if request.status == ReservationRequest.Status.REJECTED:
                return request
            if not request.is_pending:
                raise BookingStateError(f"Cannot reject request in {request.status} status")

            try:
                request.reject(decided_by=actor_uuid(actor))
            except ValueError as e:
                raise BookingStateError(str(e))

            logger.info(f"Reservation request {request.id} rejected")

            actor_id = actor_uuid(actor)
            transaction.on_commit(lambda: self._publish_rejected(request, actor_id))

        return request

    def mark_read(self, request_id: uuid.UUID, actor) -> ReservationRequest:
        """Clear the owner's unread flag."""
        request = self.get_request(request_id)
        require_owner(request.studio, actor)

        if request.studio_unread:
            request.studio_unread = False
            request.save(update_fields=['studio_unread', 'updated_at'])
        return request

    # ==========================================================================
    # Queries
    # ==========================================================================

    def get_request(self, request_id: uuid.UUID) -> ReservationRequest:
        request = ReservationRequest.objects.select_related(
            'studio', 'room'
        ).filter(id=request_id).first()
        if request is None:
            raise NotFoundError(f"Reservation request {request_id} not found")
        return request

    def get_visible_request(self, request_id: uuid.UUID, actor) -> ReservationRequest:
        """A request as seen by its requester or the studio owner."""
        request = self.get_request(request_id)
        if not is_authenticated(actor):
            raise AuthorizationError("Authentication required", requires_login=True)

        is_requester = request.requester_id is not None and request.requester_id == actor_uuid(actor)
        if not is_requester and not request.studio.is_owned_by(actor):
            raise AuthorizationError("You cannot view this request")
        return request

    def list_for_studio(self, studio_id: uuid.UUID, status: Optional[str] = None):
        queryset = ReservationRequest.objects.filter(
            studio_id=studio_id
        ).select_related('room')

        if status:
            queryset = queryset.filter(status=status)
        return queryset

    def list_for_requester(self, actor, status: Optional[str] = None):
        requester_id = actor_uuid(actor)
        if requester_id is None:
            return ReservationRequest.objects.none()

        queryset = ReservationRequest.objects.filter(
            requester_id=requester_id
        ).select_related('studio', 'room')

        if status:
            queryset = queryset.filter(status=status)
        return queryset

    # ==========================================================================
    # Events
    # ==========================================================================

    def _publish_created(self, request):
        from apps.core.events import publish_reservation_created, publish_reservation_approved

        publish_reservation_created(request)
        if request.status == ReservationRequest.Status.APPROVED:
            publish_reservation_approved(request)

    def _publish_approved(self, request, actor_id):
        from apps.core.events import publish_reservation_approved
        publish_reservation_approved(request, approved_by=actor_id)

    def _publish_rejected(self, request, actor_id):
        from apps.core.events import publish_reservation_rejected
        publish_reservation_rejected(request, rejected_by=actor_id)
