# services/studio-calendar-service/src/apps/api/views/__init__.py
"""
Studio Calendar API Views
"""

from .reservation_views import (
    ReservationRequestViewSet,
)

from .calendar_views import (
    CalendarBlockViewSet,
    StudioCalendarView,
    OccupancySummaryView,
    CalendarSettingsView,
)

from .happy_hour_views import (
    HappyHourScheduleView,
    HappyHourToggleView,
    HappyHourImportView,
)

from .pricing_views import (
    PriceEstimateView,
    AvailabilitySearchView,
)

__all__ = [
    # Reservations
    'ReservationRequestViewSet',

    # Calendar
    'CalendarBlockViewSet',
    'StudioCalendarView',
    'OccupancySummaryView',
    'CalendarSettingsView',

    # Happy hours
    'HappyHourScheduleView',
    'HappyHourToggleView',
    'HappyHourImportView',

    # Pricing and availability
    'PriceEstimateView',
    'AvailabilitySearchView',
]
