# services/studio-calendar-service/src/apps/core/services/exceptions.py
"""
Studio Calendar Service Exceptions

Domain errors raised by the service layer and translated to HTTP responses
by the API views.
"""

from typing import Optional, Dict, Any


class CalendarServiceError(Exception):
    """Base exception for calendar service errors."""

    code = 'CALENDAR_ERROR'

    def __init__(
        self,
        message: str,
        code: str = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code or self.code
        self.details = details or {}
        super().__init__(self.message)


class BookingValidationError(CalendarServiceError):
    """Malformed input, misaligned start time or bad duration."""
    code = 'VALIDATION_ERROR'


class ScheduleConflictError(CalendarServiceError):
    """Requested interval falls outside the studio's opening hours."""
    code = 'OUTSIDE_OPENING_HOURS'


class BookingConflictError(CalendarServiceError):
    """Requested interval overlaps a blocking entry."""
    code = 'BOOKING_CONFLICT'

    def __init__(self, message: str, conflicts: list = None):
        super().__init__(message, details={'conflicts': conflicts or []})
        self.conflicts = conflicts or []


class AuthorizationError(CalendarServiceError):
    """Actor is not allowed to perform the operation."""
    code = 'FORBIDDEN'

    def __init__(self, message: str, requires_login: bool = False):
        super().__init__(message)
        self.requires_login = requires_login


class BookingStateError(CalendarServiceError):
    """Illegal reservation state transition."""
    code = 'INVALID_STATE'


class NotFoundError(CalendarServiceError):
    """Studio, room, block or request does not exist."""
    code = 'NOT_FOUND'


class RateUnresolvedError(CalendarServiceError):
    """No usable rate is configured for the room."""
    code = 'RATE_UNRESOLVED'
