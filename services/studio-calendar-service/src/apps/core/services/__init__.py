# services/studio-calendar-service/src/apps/core/services/__init__.py
"""
Studio Calendar Service Business Logic
"""

from .exceptions import (
    CalendarServiceError,
    BookingValidationError,
    ScheduleConflictError,
    BookingConflictError,
    AuthorizationError,
    BookingStateError,
    NotFoundError,
    RateUnresolvedError,
)
from .availability_service import AvailabilityService
from .happy_hour_service import HappyHourService
from .pricing_service import PricingService
from .occupancy_service import OccupancyService
from .reservation_service import ReservationService
from .calendar_service import CalendarService


__all__ = [
    # Services
    'AvailabilityService',
    'HappyHourService',
    'PricingService',
    'OccupancyService',
    'ReservationService',
    'CalendarService',

    # Exceptions
    'CalendarServiceError',
    'BookingValidationError',
    'ScheduleConflictError',
    'BookingConflictError',
    'AuthorizationError',
    'BookingStateError',
    'NotFoundError',
    'RateUnresolvedError',
]
