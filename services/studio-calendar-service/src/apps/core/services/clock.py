# services/studio-calendar-service/src/apps/core/services/clock.py
"""
Time Zone Clock

Pure timezone and business-day arithmetic. Every function takes the zone
explicitly; nothing here reads settings or the database.

A business day starts at local midnight of its date. Instants whose local
hour is below the studio's cutoff hour belong to the previous date, so a
session running until 02:00 is accounted to the evening it started.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone as dt_timezone, tzinfo
from typing import Iterator, Tuple, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .exceptions import BookingValidationError

ZoneLike = Union[str, tzinfo]

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class ZonedParts:
    """Wall-clock fields of an instant in a zone."""
    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: int

    @property
    def date(self) -> date:
        return date(self.year, self.month, self.day)


def get_zone(tz: ZoneLike) -> tzinfo:
    """Resolve an IANA zone name, passing tzinfo objects through."""
    if isinstance(tz, tzinfo):
        return tz
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError, TypeError):
        raise BookingValidationError(f"Unknown timezone: {tz}")


def _require_aware(instant: datetime):
    if instant.tzinfo is None or instant.utcoffset() is None:
        raise BookingValidationError("Datetime must be timezone-aware")


def zoned_parts(instant: datetime, tz: ZoneLike) -> ZonedParts:
    _require_aware(instant)
    local = instant.astimezone(get_zone(tz))
    return ZonedParts(
        year=local.year,
        month=local.month,
        day=local.day,
        hour=local.hour,
        minute=local.minute,
        second=local.second,
    )


def utc_offset_ms(instant: datetime, tz: ZoneLike) -> int:
    """Offset of the zone from UTC at the instant (local minus UTC), in ms."""
    _require_aware(instant)
    offset = instant.astimezone(get_zone(tz)).utcoffset()
    return int(offset.total_seconds() * 1000)


def zoned_instant(year: int, month: int, day: int, minutes: int, tz: ZoneLike) -> datetime:
    """
    Instant of local ``year-month-day`` plus ``minutes`` in the zone.

    Builds the wall time as if it were UTC, then shifts it back by the zone
    offset. The offset is re-read at the corrected instant so a DST change
    between the guess and the answer is picked up.
    """
    guess = datetime(year, month, day, tzinfo=dt_timezone.utc) + timedelta(minutes=minutes)
    offset = utc_offset_ms(guess, tz)
    result = guess - timedelta(milliseconds=offset)

    corrected = utc_offset_ms(result, tz)
    if corrected != offset:
        result = guess - timedelta(milliseconds=corrected)

    return result


def local_midnight(day: date, tz: ZoneLike) -> datetime:
    return zoned_instant(day.year, day.month, day.day, 0, tz)


def business_date(instant: datetime, cutoff_hour: int, tz: ZoneLike) -> date:
    """Calendar date of the business day the instant belongs to."""
    parts = zoned_parts(instant, tz)
    if parts.hour < cutoff_hour:
        return parts.date - timedelta(days=1)
    return parts.date


def business_day_start(instant: datetime, cutoff_hour: int, tz: ZoneLike) -> datetime:
    """Local 00:00 of the instant's business day."""
    return local_midnight(business_date(instant, cutoff_hour, tz), tz)


def weekday_index(instant: datetime, tz: ZoneLike) -> int:
    """Weekday of the instant's local date, 0 being Monday."""
    return zoned_parts(instant, tz).date.weekday()


def business_weekday(instant: datetime, cutoff_hour: int, tz: ZoneLike) -> int:
    return business_date(instant, cutoff_hour, tz).weekday()


def minutes_between(start: datetime, end: datetime) -> float:
    """Elapsed minutes from start to end."""
    return (end - start).total_seconds() / 60


def iter_local_days(
    range_start: datetime,
    range_end: datetime,
    tz: ZoneLike,
    lead_days: int = 0
) -> Iterator[Tuple[date, datetime]]:
    """
    Yield ``(date, local midnight)`` for each local date touching the range.

    ``lead_days`` starts the walk that many days before the range's first
    local date.
    """
    day = zoned_parts(range_start, tz).date - timedelta(days=lead_days)
    day_start = local_midnight(day, tz)
    while day_start < range_end:
        yield day, day_start
        day = day + timedelta(days=1)
        day_start = local_midnight(day, tz)
