# services/studio-calendar-service/src/apps/core/models/__init__.py
"""
Studio Calendar Service Models
"""

from .studio import Studio, Room, CalendarSettings
from .calendar_block import CalendarBlock
from .happy_hour import HappyHourRule, HappyHourSlot
from .reservation import (
    ReservationRequest,
    ReservationState,
    Pending,
    Approved,
    Rejected,
)

__all__ = [
    'Studio',
    'Room',
    'CalendarSettings',
    'CalendarBlock',
    'HappyHourRule',
    'HappyHourSlot',
    'ReservationRequest',
    'ReservationState',
    'Pending',
    'Approved',
    'Rejected',
]
