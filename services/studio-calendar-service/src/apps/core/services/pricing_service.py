# services/studio-calendar-service/src/apps/core/services/pricing_service.py
"""
Pricing Service

Rate resolution for rooms and hour-by-hour interval pricing with
happy-hour discounts.
"""

import re
import logging
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, Optional

from .exceptions import BookingValidationError, RateUnresolvedError

logger = logging.getLogger(__name__)

NUMBER_PREFIX = re.compile(r'^(\d+(?:\.\d+)?|\.\d+)')
THOUSANDS_TAIL = re.compile(r'^\d+(?:\.\d{3})+$')

BASE_RATE_FIELDS = ('hourly_rate', 'min_rate', 'flat_rate')
REVENUE_RATE_FIELDS = ('hourly_rate', 'flat_rate', 'min_rate', 'daily_rate')

TWO_PLACES = Decimal('0.01')


def parse_price(value: Any) -> Optional[Decimal]:
    """
    Normalize a free-text price into a Decimal.

    Handles Turkish and English notation: "1.500" and "1.500,00" are fifteen
    hundred, "750,5" is seven hundred fifty and a half. Currency symbols and
    words are ignored. Returns None when no number can be read.
    """
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))

    cleaned = re.sub(r'[^\d.,]', '', str(value).strip())
    if not cleaned:
        return None

    has_comma = ',' in cleaned
    has_dot = '.' in cleaned

    if has_comma and has_dot:
        normalized = cleaned.replace('.', '').replace(',', '.', 1)
    elif has_comma:
        normalized = cleaned.replace(',', '.', 1)
    elif has_dot and THOUSANDS_TAIL.match(cleaned):
        normalized = cleaned.replace('.', '')
    else:
        normalized = cleaned

    match = NUMBER_PREFIX.match(normalized)
    if not match:
        return None

    try:
        return Decimal(match.group(1))
    except InvalidOperation:
        return None


def _first_rate(room, fields) -> Optional[Decimal]:
    for field in fields:
        rate = parse_price(getattr(room, field, None))
        if rate is not None:
            return rate
    return None


def resolve_rate(room, is_happy_hour: bool = False) -> Optional[Decimal]:
    """Hourly rate of a room; happy hour falls back to the base chain."""
    base = _first_rate(room, BASE_RATE_FIELDS)
    if not is_happy_hour:
        return base

    happy = parse_price(getattr(room, 'happy_hour_rate', None))
    return happy if happy is not None else base


def revenue_rate(room, is_happy_hour: bool = False) -> Optional[Decimal]:
    """Rate used for reporting, which also accepts daily prices."""
    base = _first_rate(room, REVENUE_RATE_FIELDS)
    if not is_happy_hour:
        return base

    happy = parse_price(getattr(room, 'happy_hour_rate', None))
    return happy if happy is not None else base


def _intersects(window, start: datetime, end: datetime) -> bool:
    return window.start_at < end and window.end_at > start


def price_for_interval(
    room,
    start: datetime,
    hours: int,
    happy_windows: Iterable = ()
) -> Optional[Decimal]:
    """
    Price of ``hours`` consecutive hours starting at ``start``.

    Each hour touching a happy-hour window is charged the happy rate, the
    rest the base rate. Returns None as soon as an hour has no rate.
    """
    windows = list(happy_windows)
    base_rate = resolve_rate(room, is_happy_hour=False)
    happy_rate = resolve_rate(room, is_happy_hour=True)

    total = Decimal('0')
    for index in range(hours):
        slot_start = start + timedelta(hours=index)
        slot_end = slot_start + timedelta(hours=1)
        is_happy = any(_intersects(window, slot_start, slot_end) for window in windows)

        rate = happy_rate if is_happy else base_rate
        if rate is None:
            return None
        total += rate

    return total.quantize(TWO_PLACES)


class PricingService:
    """Price quotes for room bookings."""

    def __init__(self, happy_hour_service=None):
        if happy_hour_service is None:
            from .happy_hour_service import HappyHourService
            happy_hour_service = HappyHourService()
        self.happy_hour_service = happy_hour_service

    def happy_windows(self, room, calendar_settings, start: datetime, end: datetime) -> list:
        """Happy-hour instances of the room intersecting [start, end)."""
        if calendar_settings is None or not calendar_settings.happy_hour_enabled:
            return []

        expanded = self.happy_hour_service.expand_for_rooms(
            [room],
            start,
            end,
            tz=calendar_settings.timezone,
        )
        return expanded

    def price(self, room, calendar_settings, start: datetime, hours: int) -> Optional[Decimal]:
        """Interval price, or None when the room has no usable rate."""
        end = start + timedelta(hours=hours)
        windows = self.happy_windows(room, calendar_settings, start, end)
        return price_for_interval(room, start, hours, windows)

    def quote(self, room, calendar_settings, start: datetime, hours: int) -> Dict[str, Any]:
        """Detailed price breakdown; raises when the price is unknown."""
        if hours < 1 or hours > 24:
            raise BookingValidationError("Duration must be between 1 and 24 hours")

        end = start + timedelta(hours=hours)
        windows = self.happy_windows(room, calendar_settings, start, end)
        total = price_for_interval(room, start, hours, windows)

        if total is None:
            logger.info(f"No rate configured for room {room.id}")
            raise RateUnresolvedError(
                f"Room {room.name} has no usable rate",
                details={'room_id': str(room.id)}
            )

        happy_hours = sum(
            1 for index in range(hours)
            if any(
                _intersects(
                    window,
                    start + timedelta(hours=index),
                    start + timedelta(hours=index + 1)
                )
                for window in windows
            )
        )

        return {
            'room_id': room.id,
            'start_at': start,
            'end_at': end,
            'hours': hours,
            'happy_hours': happy_hours,
            'base_rate': resolve_rate(room, is_happy_hour=False),
            'happy_hour_rate': resolve_rate(room, is_happy_hour=True),
            'total_price': total,
        }
