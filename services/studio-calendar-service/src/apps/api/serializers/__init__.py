# services/studio-calendar-service/src/apps/api/serializers/__init__.py
"""
Studio Calendar API Serializers
"""

from .reservation_serializers import (
    ReservationRequestSerializer,
    ReservationCreateSerializer,
    ReservationDecisionSerializer,
)

from .calendar_serializers import (
    CalendarBlockSerializer,
    CalendarBlockCreateSerializer,
    CalendarBlockUpdateSerializer,
    CalendarSettingsSerializer,
    CalendarSettingsUpdateSerializer,
    CalendarQuerySerializer,
    CalendarViewSerializer,
    HappyHourInstanceSerializer,
    OccupancySummarySerializer,
)

from .happy_hour_serializers import (
    HappyHourDaySerializer,
    HappyHourScheduleSerializer,
    HappyHourToggleSerializer,
    HappyHourRuleSerializer,
)

from .pricing_serializers import (
    PriceEstimateSerializer,
    PriceEstimateResultSerializer,
    AvailabilityQuerySerializer,
    AvailableRoomSerializer,
)

__all__ = [
    # Reservations
    'ReservationRequestSerializer',
    'ReservationCreateSerializer',
    'ReservationDecisionSerializer',

    # Calendar
    'CalendarBlockSerializer',
    'CalendarBlockCreateSerializer',
    'CalendarBlockUpdateSerializer',
    'CalendarSettingsSerializer',
    'CalendarSettingsUpdateSerializer',
    'CalendarQuerySerializer',
    'CalendarViewSerializer',
    'HappyHourInstanceSerializer',
    'OccupancySummarySerializer',

    # Happy hours
    'HappyHourDaySerializer',
    'HappyHourScheduleSerializer',
    'HappyHourToggleSerializer',
    'HappyHourRuleSerializer',

    # Pricing and availability
    'PriceEstimateSerializer',
    'PriceEstimateResultSerializer',
    'AvailabilityQuerySerializer',
    'AvailableRoomSerializer',
]
