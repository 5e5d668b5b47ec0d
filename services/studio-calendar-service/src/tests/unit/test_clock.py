# services/studio-calendar-service/src/tests/unit/test_clock.py
"""
Unit Tests for Time Zone Clock

Business-day and zone arithmetic; no database access.
"""

from datetime import date, datetime, timedelta, timezone as dt_timezone
from zoneinfo import ZoneInfo

import pytest

from apps.core.services import BookingValidationError
from apps.core.services.clock import (
    business_date,
    business_day_start,
    business_weekday,
    get_zone,
    iter_local_days,
    local_midnight,
    utc_offset_ms,
    weekday_index,
    zoned_instant,
    zoned_parts,
)

ISTANBUL = ZoneInfo('Europe/Istanbul')
BERLIN = 'Europe/Berlin'


class TestZoneConversion:
    """Tests for zone offsets and wall-clock construction."""

    def test_offset_is_local_minus_utc(self):
        instant = datetime(2030, 1, 8, 12, 0, tzinfo=dt_timezone.utc)
        assert utc_offset_ms(instant, 'Europe/Istanbul') == 3 * 60 * 60 * 1000
        assert utc_offset_ms(instant, 'America/New_York') == -5 * 60 * 60 * 1000

    def test_zoned_parts(self):
        instant = datetime(2030, 1, 8, 21, 30, tzinfo=dt_timezone.utc)
        parts = zoned_parts(instant, 'Europe/Istanbul')

        assert parts.date == date(2030, 1, 9)
        assert (parts.hour, parts.minute) == (0, 30)

    def test_zoned_instant(self):
        instant = zoned_instant(2030, 1, 8, 10 * 60, 'Europe/Istanbul')
        assert instant == datetime(2030, 1, 8, 7, 0, tzinfo=dt_timezone.utc)

    def test_local_midnight_on_dst_change(self):
        # Berlin moves to summer time at 01:00 UTC on 2030-03-31
        assert local_midnight(date(2030, 3, 31), BERLIN) == datetime(
            2030, 3, 30, 23, 0, tzinfo=dt_timezone.utc
        )
        noon = zoned_instant(2030, 3, 31, 12 * 60, BERLIN)
        assert noon == datetime(2030, 3, 31, 10, 0, tzinfo=dt_timezone.utc)

    def test_naive_datetime_rejected(self):
        with pytest.raises(BookingValidationError):
            zoned_parts(datetime(2030, 1, 8, 12, 0), 'Europe/Istanbul')

    def test_unknown_zone_rejected(self):
        with pytest.raises(BookingValidationError):
            get_zone('Mars/Olympus_Mons')


class TestBusinessDay:
    """Tests for the cutoff-hour business day."""

    def test_hours_before_cutoff_belong_to_previous_day(self):
        for hour in range(24):
            instant = datetime(2030, 1, 8, hour, 0, tzinfo=ISTANBUL)
            expected = date(2030, 1, 7) if hour < 4 else date(2030, 1, 8)
            assert business_date(instant, 4, ISTANBUL) == expected, hour

    def test_zero_cutoff_uses_calendar_date(self):
        instant = datetime(2030, 1, 8, 0, 30, tzinfo=ISTANBUL)
        assert business_date(instant, 0, ISTANBUL) == date(2030, 1, 8)

    def test_business_day_start_is_local_midnight(self):
        instant = datetime(2030, 1, 9, 2, 0, tzinfo=ISTANBUL)
        start = business_day_start(instant, 4, ISTANBUL)

        assert start == datetime(2030, 1, 8, 0, 0, tzinfo=ISTANBUL)
        assert (instant - start) == timedelta(hours=26)

    def test_business_weekday(self):
        # 2030-01-09 01:00 is still Tuesday's session
        instant = datetime(2030, 1, 9, 1, 0, tzinfo=ISTANBUL)
        assert business_weekday(instant, 4, ISTANBUL) == 1

    def test_weekday_index_uses_local_date(self):
        # 23:30 UTC on Monday is already Tuesday in Istanbul
        instant = datetime(2030, 1, 7, 23, 30, tzinfo=dt_timezone.utc)
        assert weekday_index(instant, ISTANBUL) == 1
        assert weekday_index(instant, 'UTC') == 0

    def test_iter_local_days(self):
        start = datetime(2030, 1, 7, 0, 0, tzinfo=ISTANBUL)
        end = datetime(2030, 1, 14, 0, 0, tzinfo=ISTANBUL)

        days = list(iter_local_days(start, end, ISTANBUL))
        assert [day for day, _ in days] == [date(2030, 1, 7) + timedelta(days=i) for i in range(7)]

        with_lead = list(iter_local_days(start, end, ISTANBUL, lead_days=1))
        assert with_lead[0][0] == date(2030, 1, 6)
        assert len(with_lead) == 8
