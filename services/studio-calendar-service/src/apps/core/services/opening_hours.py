# services/studio-calendar-service/src/apps/core/services/opening_hours.py
"""
Opening Hours

Normalization and queries over a studio's weekly open/closed schedule.

A schedule is a Monday-first list of seven days. A close time at or before
the open time means the day runs past midnight, so its open range ends
after minute 1440 of the business day.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from .clock import (
    MINUTES_PER_DAY,
    ZoneLike,
    business_date,
    business_day_start,
    minutes_between,
    weekday_index,
)
from .exceptions import BookingValidationError

TIME_PATTERN = re.compile(r'^([01]?\d|2[0-3]):([0-5]\d)$')

DEFAULT_OPEN_TIME = '09:00'
DEFAULT_CLOSE_TIME = '21:00'
FALLBACK_TIME = '00:00'


@dataclass(frozen=True)
class OpeningDay:
    open: bool
    open_time: str
    close_time: str


@dataclass(frozen=True)
class OpenRange:
    """Open interval in minutes from the business-day start."""
    start: int
    end: int

    @property
    def length(self) -> int:
        return max(0, self.end - self.start)


CLOSED_DAY = OpeningDay(open=False, open_time=FALLBACK_TIME, close_time=FALLBACK_TIME)

DEFAULT_HOURS = tuple(
    OpeningDay(open=True, open_time=DEFAULT_OPEN_TIME, close_time=DEFAULT_CLOSE_TIME)
    for _ in range(7)
)


# ==========================================================================
# Time Strings
# ==========================================================================

def minutes_from_time(value: Any) -> Optional[int]:
    """Parse "HH:MM" into minutes since midnight, None when malformed."""
    if not isinstance(value, str):
        return None
    match = TIME_PATTERN.match(value.strip())
    if not match:
        return None
    return int(match.group(1)) * 60 + int(match.group(2))


def minutes_to_time(minutes: int) -> str:
    """Format minutes as "HH:MM", wrapping values past midnight."""
    safe = int(minutes) % MINUTES_PER_DAY
    return f"{safe // 60:02d}:{safe % 60:02d}"


# ==========================================================================
# Normalization
# ==========================================================================

def _coerce_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('true', '1', 'yes', 'on')
    return bool(value)


def _coerce_time(value: Any) -> str:
    minutes = minutes_from_time(value)
    if minutes is None:
        return FALLBACK_TIME
    return minutes_to_time(minutes)


def _coerce_day(raw: Any) -> OpeningDay:
    if isinstance(raw, OpeningDay):
        return raw
    if not isinstance(raw, dict):
        return CLOSED_DAY

    open_time = raw.get('open_time', raw.get('openTime'))
    close_time = raw.get('close_time', raw.get('closeTime'))

    return OpeningDay(
        open=_coerce_flag(raw.get('open', False)),
        open_time=_coerce_time(open_time),
        close_time=_coerce_time(close_time),
    )


def normalize(raw: Any) -> List[OpeningDay]:
    """
    Canonical seven-day schedule.

    Anything that is not a list yields the default week. Days missing from a
    short list are closed, and malformed times fall back to "00:00" (a day
    with both times malformed is open around the clock).
    """
    if not isinstance(raw, (list, tuple)):
        return list(DEFAULT_HOURS)

    days = [_coerce_day(item) for item in list(raw)[:7]]
    days.extend(CLOSED_DAY for _ in range(7 - len(days)))
    return days


def validate(raw: Any) -> List[Dict[str, Any]]:
    """Strictly check owner-supplied weekly hours before they are stored."""
    if not isinstance(raw, (list, tuple)) or len(raw) != 7:
        raise BookingValidationError("Weekly hours must list exactly 7 days")

    for index, day in enumerate(raw):
        if not isinstance(day, dict):
            raise BookingValidationError(f"Day {index} must be an object")
        for key, camel in (('open_time', 'openTime'), ('close_time', 'closeTime')):
            if minutes_from_time(day.get(key, day.get(camel))) is None:
                raise BookingValidationError(f"Day {index} has an invalid {key}")

    return to_json(normalize(raw))


def to_json(hours: List[OpeningDay]) -> List[Dict[str, Any]]:
    return [
        {
            'open': day.open,
            'open_time': day.open_time,
            'close_time': day.close_time,
        }
        for day in hours
    ]


def effective_opening_hours(studio, calendar_settings=None) -> List[OpeningDay]:
    """Settings override first, then the studio's own schedule."""
    raw = None
    if calendar_settings is not None and calendar_settings.weekly_hours:
        raw = calendar_settings.weekly_hours
    elif studio is not None and studio.opening_hours:
        raw = studio.opening_hours
    return normalize(raw)


# ==========================================================================
# Queries
# ==========================================================================

def open_range_for_weekday(weekday: int, hours: List[OpeningDay]) -> Optional[OpenRange]:
    if weekday < 0 or weekday >= len(hours):
        return None

    day = hours[weekday]
    if not day.open:
        return None

    start = minutes_from_time(day.open_time)
    end = minutes_from_time(day.close_time)
    if start is None or end is None:
        return OpenRange(0, MINUTES_PER_DAY)

    if end <= start:
        end += MINUTES_PER_DAY
    return OpenRange(start, end)


def open_range_for_day(day_start: datetime, hours: List[OpeningDay], tz: ZoneLike) -> Optional[OpenRange]:
    """Open range of the business day beginning at ``day_start``."""
    return open_range_for_weekday(weekday_index(day_start, tz), hours)


def is_within_opening_hours(
    start_at: datetime,
    end_at: datetime,
    hours: List[OpeningDay],
    cutoff_hour: int,
    tz: ZoneLike
) -> bool:
    """
    Check that [start_at, end_at] lies inside one business day's open range.

    Offsets are measured from the start of ``start_at``'s business day, so a
    request running past midnight is judged against a single day.
    """
    if end_at <= start_at:
        return False

    open_range = open_range_for_weekday(
        business_date(start_at, cutoff_hour, tz).weekday(),
        hours
    )
    if open_range is None:
        return False

    day_start = business_day_start(start_at, cutoff_hour, tz)
    start_offset = minutes_between(day_start, start_at)
    end_offset = minutes_between(day_start, end_at)

    return start_offset >= open_range.start and end_offset <= open_range.end
