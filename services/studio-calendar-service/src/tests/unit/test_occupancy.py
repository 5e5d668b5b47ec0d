# services/studio-calendar-service/src/tests/unit/test_occupancy.py
"""
Unit Tests for Occupancy and Revenue
"""

from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace
from zoneinfo import ZoneInfo

import pytest
from django.core.cache import cache

from apps.core.models import CalendarBlock, Room
from apps.core.services import OccupancyService
from apps.core.services.happy_hour_service import HappyHourTemplate
from apps.core.services.occupancy_service import (
    SUMMARY_CACHE_PREFIX,
    occupancy_percent,
    occupied_minutes,
    open_minutes,
    revenue,
)
from apps.core.services.opening_hours import normalize

TZ = ZoneInfo('Europe/Istanbul')

DAILY = normalize([{'open': True, 'open_time': '10:00', 'close_time': '22:00'}] * 7)
LATE = normalize([{'open': True, 'open_time': '18:00', 'close_time': '02:00'}] * 7)
CLOSED = normalize([{'open': False}] * 7)


def local(day, hour, minute=0):
    return datetime(2030, 1, day, hour, minute, tzinfo=TZ)


def block(start_at, end_at, room_id='room', type='manual_block', status=None):
    return SimpleNamespace(room_id=room_id, start_at=start_at, end_at=end_at, type=type, status=status)


WEEK = (local(7, 0), local(14, 0))


class TestOccupancy:

    def test_open_minutes(self):
        assert open_minutes(*WEEK, DAILY, 1, TZ) == 7 * 720
        assert open_minutes(*WEEK, DAILY, 3, TZ) == 3 * 7 * 720
        assert open_minutes(*WEEK, CLOSED, 2, TZ) == 0

    def test_block_clipped_to_opening_hours(self):
        assert occupied_minutes(*WEEK, [block(local(8, 14), local(8, 16))], DAILY, 4, TZ) == 120
        assert occupied_minutes(*WEEK, [block(local(8, 21), local(8, 23))], DAILY, 4, TZ) == 60

    def test_after_midnight_block_counts_for_previous_day(self):
        assert occupied_minutes(*WEEK, [block(local(9, 1), local(9, 3))], LATE, 4, TZ) == 60

    def test_released_blocks_ignored(self):
        released = block(local(8, 14), local(8, 16), type='reservation', status='cancelled')
        assert occupied_minutes(*WEEK, [released], DAILY, 4, TZ) == 0

    def test_block_clipped_to_range(self):
        assert occupied_minutes(
            local(8, 15), local(9, 0), [block(local(8, 14), local(8, 16))], DAILY, 4, TZ
        ) == 60

    def test_closed_week_has_zero_occupancy(self):
        open_total = open_minutes(*WEEK, CLOSED, 1, TZ)
        occupied = occupied_minutes(*WEEK, [], CLOSED, 4, TZ)

        assert occupancy_percent(occupied, open_total) == 0
        assert revenue(*WEEK, [], {}, {}, TZ).total == Decimal('0.00')

    def test_percent_is_rounded(self):
        assert occupancy_percent(120, 7 * 720) == 2.4


class TestRevenue:

    def test_happy_and_normal_minutes(self):
        room = SimpleNamespace(hourly_rate='100', happy_hour_rate='50', min_rate=None, flat_rate=None, daily_rate=None)
        templates = {'room': [HappyHourTemplate(1, 1080, 1200)]}

        result = revenue(*WEEK, [block(local(8, 17), local(8, 20))], {'room': room}, templates, TZ)

        assert result.total == Decimal('200.00')
        assert result.unpriced_blocks == 0

    def test_room_without_rate_is_counted_not_priced(self):
        room = SimpleNamespace(hourly_rate=None, happy_hour_rate=None, min_rate=None, flat_rate=None, daily_rate=None)

        result = revenue(*WEEK, [block(local(8, 14), local(8, 16))], {'room': room}, {}, TZ)

        assert result.total == Decimal('0.00')
        assert result.unpriced_blocks == 1

    def test_partial_hours(self):
        room = SimpleNamespace(hourly_rate='90', happy_hour_rate=None, min_rate=None, flat_rate=None, daily_rate=None)

        result = revenue(*WEEK, [block(local(8, 14), local(8, 14, 20))], {'room': room}, {}, TZ)
        assert result.total == Decimal('30.00')


@pytest.mark.django_db
class TestOccupancyService:
    """Tests for OccupancyService.get_summary."""

    def setup_method(self):
        self.service = OccupancyService()

    def test_summary(self, studio, room, calendar_settings, create_block):
        create_block(local(8, 14), local(8, 16))

        summary = self.service.get_summary(studio, now=local(8, 12))

        assert summary['week_start'] == local(7, 0)
        assert summary['week_end'] == local(14, 0)
        assert summary['month_start'] == local(1, 0)
        assert summary['month_end'] == datetime(2030, 2, 1, tzinfo=TZ)
        assert summary['week_occupancy'] == 2.4
        assert summary['month_occupancy'] == 0.5
        assert summary['month_revenue'] == Decimal('200.00')
        assert summary['unpriced_blocks'] == 0
        assert summary['currency'] == 'TRY'

    def test_week_before_cutoff_belongs_to_previous_day(self, studio, room, calendar_settings):
        # Monday 02:00 still belongs to Sunday's business day
        summary = self.service.get_summary(studio, now=local(14, 2))
        assert summary['week_start'] == local(7, 0)

    def test_happy_hours_only_when_enabled(self, studio, room, calendar_settings, create_block):
        from apps.core.models import HappyHourRule

        HappyHourRule.objects.create(room=room, weekday=1, start_minutes=1080, end_minutes=1200)
        create_block(local(8, 17), local(8, 20))

        assert self.service.get_summary(studio, now=local(8, 12))['month_revenue'] == Decimal('300.00')

        calendar_settings.happy_hour_enabled = True
        calendar_settings.save()
        assert self.service.get_summary(studio, now=local(8, 12))['month_revenue'] == Decimal('200.00')

    def test_closed_studio(self, studio, room, calendar_settings):
        calendar_settings.weekly_hours = [{'open': False, 'open_time': '10:00', 'close_time': '22:00'}] * 7
        calendar_settings.save()

        summary = self.service.get_summary(studio, now=local(8, 12))

        assert summary['week_occupancy'] == 0
        assert summary['month_occupancy'] == 0
        assert summary['month_revenue'] == Decimal('0.00')

    def test_inactive_rooms_excluded(self, studio, room, other_room, calendar_settings, create_block):
        create_block(local(8, 14), local(8, 16), room=other_room)
        Room.objects.filter(id=other_room.id).update(is_active=False)

        summary = self.service.get_summary(studio, now=local(8, 12))
        assert summary['week_occupancy'] == 0
        assert summary['month_revenue'] == Decimal('0.00')

    def test_live_summary_is_cached_until_blocks_change(self, studio, room, calendar_settings, create_block):
        key = f"{SUMMARY_CACHE_PREFIX}:{studio.id}"

        self.service.get_summary(studio)
        assert cache.get(key) is not None

        create_block(local(8, 14), local(8, 16))
        assert cache.get(key) is None

        self.service.get_summary(studio)
        CalendarBlock.objects.all().delete()
        assert cache.get(key) is None
