# services/studio-calendar-service/src/apps/core/services/occupancy_service.py
"""
Occupancy Service

Occupancy and revenue reporting over a studio's calendar.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, Iterable, List

from django.conf import settings
from django.utils import timezone

from apps.core.models import CalendarBlock, CalendarSettings, Studio
from shared.common.cache import CacheKeyBuilder, cached, invalidate

from .availability_service import is_blocking
from .clock import (
    ZoneLike,
    business_date,
    business_day_start,
    iter_local_days,
    local_midnight,
    minutes_between,
)
from .happy_hour_service import HappyHourService, HappyHourTemplate, expand
from .opening_hours import (
    OpeningDay,
    effective_opening_hours,
    open_range_for_day,
    open_range_for_weekday,
)
from .pricing_service import TWO_PLACES, revenue_rate

logger = logging.getLogger(__name__)

cache_keys = CacheKeyBuilder(getattr(settings, 'SERVICE_NAME', 'studio-calendar-service'))
SUMMARY_CACHE_PREFIX = cache_keys.build('summary')


@dataclass(frozen=True)
class RevenueResult:
    total: Decimal
    unpriced_blocks: int


# ==========================================================================
# Calculations
# ==========================================================================

def _clip(start: datetime, end: datetime, lower: datetime, upper: datetime):
    clipped_start = max(start, lower)
    clipped_end = min(end, upper)
    if clipped_end <= clipped_start:
        return None
    return clipped_start, clipped_end


def open_minutes(
    range_start: datetime,
    range_end: datetime,
    hours: List[OpeningDay],
    room_count: int,
    tz: ZoneLike
) -> int:
    """Open minutes of every local day in the range, times the room count."""
    total = 0
    for _, day_start in iter_local_days(range_start, range_end, tz):
        open_range = open_range_for_day(day_start, hours, tz)
        if open_range is not None:
            total += open_range.length
    return total * max(room_count, 1)


def occupied_minutes(
    range_start: datetime,
    range_end: datetime,
    blocks: Iterable,
    hours: List[OpeningDay],
    cutoff_hour: int,
    tz: ZoneLike
) -> float:
    """
    Minutes of blocking entries inside the range and inside opening hours.

    Each entry is clipped to the range, then to the open range of the
    business day it starts in.
    """
    total = 0.0
    for block in blocks:
        if not is_blocking(block):
            continue

        clipped = _clip(block.start_at, block.end_at, range_start, range_end)
        if clipped is None:
            continue
        start, end = clipped

        open_range = open_range_for_weekday(
            business_date(start, cutoff_hour, tz).weekday(), hours
        )
        if open_range is None:
            continue

        day_start = business_day_start(start, cutoff_hour, tz)
        clipped = _clip(
            start,
            end,
            day_start + timedelta(minutes=open_range.start),
            day_start + timedelta(minutes=open_range.end),
        )
        if clipped is not None:
            total += minutes_between(*clipped)

    return total


def occupancy_percent(occupied: float, open_total: float) -> float:
    if not open_total:
        return 0
    return round(occupied / open_total * 100, 1)


def _happy_minutes(start: datetime, end: datetime, windows) -> float:
    """Minutes of [start, end) covered by the union of the windows."""
    spans = sorted(
        clipped for clipped in (
            _clip(w.start_at, w.end_at, start, end) for w in windows
        ) if clipped is not None
    )

    total = 0.0
    current_start = current_end = None
    for span_start, span_end in spans:
        if current_end is None or span_start > current_end:
            if current_end is not None:
                total += minutes_between(current_start, current_end)
            current_start, current_end = span_start, span_end
        else:
            current_end = max(current_end, span_end)
    if current_end is not None:
        total += minutes_between(current_start, current_end)
    return total


def revenue(
    range_start: datetime,
    range_end: datetime,
    blocks: Iterable,
    rooms: Dict[Any, Any],
    templates_by_room: Dict[Any, List[HappyHourTemplate]],
    tz: ZoneLike
) -> RevenueResult:
    """
    Revenue of the blocking entries inside the range.

    Each entry is split into happy-hour and normal minutes and each part is
    priced at the room's reporting rate. Entries that need a rate the room
    does not have are counted as unpriced instead of being priced at zero.
    """
    total = Decimal('0')
    unpriced = 0

    for block in blocks:
        if not is_blocking(block):
            continue

        clipped = _clip(block.start_at, block.end_at, range_start, range_end)
        if clipped is None:
            continue
        start, end = clipped

        room = rooms.get(block.room_id)
        if room is None:
            continue

        windows = expand(
            {block.room_id: templates_by_room.get(block.room_id, [])}, start, end, tz
        )
        happy = _happy_minutes(start, end, windows)
        normal = minutes_between(start, end) - happy

        base_rate = revenue_rate(room, is_happy_hour=False)
        happy_rate = revenue_rate(room, is_happy_hour=True)
        if (normal > 0 and base_rate is None) or (happy > 0 and happy_rate is None):
            unpriced += 1
            continue

        amount = Decimal('0')
        if normal > 0:
            amount += base_rate * Decimal(str(normal)) / 60
        if happy > 0:
            amount += happy_rate * Decimal(str(happy)) / 60
        total += amount

    return RevenueResult(total=total.quantize(TWO_PLACES), unpriced_blocks=unpriced)


# ==========================================================================
# Summary
# ==========================================================================

def invalidate_summary(studio_id):
    invalidate(f"{SUMMARY_CACHE_PREFIX}:{studio_id}")


class OccupancyService:
    """Weekly and monthly occupancy summary for a studio."""

    def __init__(self, happy_hour_service=None):
        self.happy_hour_service = happy_hour_service or HappyHourService()

    def get_summary(self, studio: Studio, now: datetime = None) -> Dict[str, Any]:
        """
        Occupancy of the current week and month, and the month's revenue.

        Live summaries are cached briefly; passing ``now`` computes a fresh
        one for that instant.
        """
        if now is None:
            return self._cached_summary(studio.id)
        return self._compute(studio, now)

    @cached(
        SUMMARY_CACHE_PREFIX,
        timeout=getattr(settings, 'CALENDAR_SUMMARY_CACHE_TTL', 60),
        key_func=lambda self, studio_id: studio_id
    )
    def _cached_summary(self, studio_id) -> Dict[str, Any]:
        studio = Studio.objects.get(id=studio_id)
        return self._compute(studio, timezone.now())

    def _compute(self, studio: Studio, now: datetime) -> Dict[str, Any]:
        calendar_settings = CalendarSettings.for_studio(studio)
        tz = calendar_settings.timezone
        cutoff_hour = calendar_settings.day_cutoff_hour
        hours = effective_opening_hours(studio, calendar_settings)

        today = business_date(now, cutoff_hour, tz)
        week_start_day = today - timedelta(days=today.weekday())
        month_start_day = date(today.year, today.month, 1)
        next_month_day = (month_start_day + timedelta(days=32)).replace(day=1)

        week_start = local_midnight(week_start_day, tz)
        week_end = local_midnight(week_start_day + timedelta(days=7), tz)
        month_start = local_midnight(month_start_day, tz)
        month_end = local_midnight(next_month_day, tz)

        rooms = {room.id: room for room in studio.rooms.filter(is_active=True)}
        room_count = len(rooms)

        blocks = list(
            CalendarBlock.get_in_range(
                studio.id, min(week_start, month_start), max(week_end, month_end)
            ).filter(CalendarBlock.blocking_q(), room_id__in=list(rooms))
        )

        templates = {}
        if calendar_settings.happy_hour_enabled:
            templates = self.happy_hour_service.templates_for_rooms(rooms.values())

        week_open = open_minutes(week_start, week_end, hours, room_count, tz)
        month_open = open_minutes(month_start, month_end, hours, room_count, tz)
        week_occupied = occupied_minutes(week_start, week_end, blocks, hours, cutoff_hour, tz)
        month_occupied = occupied_minutes(month_start, month_end, blocks, hours, cutoff_hour, tz)
        month_revenue = revenue(month_start, month_end, blocks, rooms, templates, tz)

        logger.debug(
            f"Summary for studio {studio.id}: week {week_occupied}/{week_open}, "
            f"month {month_occupied}/{month_open}"
        )

        return {
            'studio_id': studio.id,
            'week_start': week_start,
            'week_end': week_end,
            'month_start': month_start,
            'month_end': month_end,
            'week_occupancy': occupancy_percent(week_occupied, week_open),
            'month_occupancy': occupancy_percent(month_occupied, month_open),
            'month_revenue': month_revenue.total,
            'unpriced_blocks': month_revenue.unpriced_blocks,
            'currency': settings.RESERVATION_CURRENCY,
        }
