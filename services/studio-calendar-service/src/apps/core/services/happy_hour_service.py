# services/studio-calendar-service/src/apps/core/services/happy_hour_service.py
"""
Happy Hour Service

Weekly happy-hour templates: compression of concrete instances into
templates, expansion of templates into instances for a date range, and the
persisted per-room schedule.
"""

import uuid
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

from django.db import transaction

from apps.core.models import CalendarSettings, HappyHourRule, HappyHourSlot

from .clock import (
    MINUTES_PER_DAY,
    ZoneLike,
    business_date,
    business_day_start,
    iter_local_days,
    minutes_between,
)
from .opening_hours import (
    effective_opening_hours,
    minutes_from_time,
    minutes_to_time,
    open_range_for_weekday,
)
from .exceptions import BookingValidationError

logger = logging.getLogger(__name__)

FALLBACK_END_TIME = '22:00'


@dataclass(frozen=True)
class HappyHourTemplate:
    """Weekly window in minutes from the business-day start."""
    weekday: int
    start_minutes: int
    end_minutes: int


@dataclass(frozen=True)
class HappyHourInstance:
    """A template materialized on a concrete business day."""
    room_id: Any
    start_at: datetime
    end_at: datetime


# ==========================================================================
# Templates
# ==========================================================================

def compress_to_templates(
    slots: Iterable,
    cutoff_hour: int,
    tz: ZoneLike
) -> Dict[Any, List[HappyHourTemplate]]:
    """
    Derive weekly templates per room from concrete happy-hour instances.

    Each slot needs ``room_id``, ``start_at`` and ``end_at``. Instances are
    keyed by (room, weekday, start offset) and the longest end wins, so
    re-inserting the same window is harmless but two windows that start
    together on one weekday collapse into the longer one.
    """
    by_key: Dict[tuple, HappyHourTemplate] = {}

    for slot in slots:
        day_start = business_day_start(slot.start_at, cutoff_hour, tz)
        weekday = business_date(slot.start_at, cutoff_hour, tz).weekday()

        start_minutes = round(minutes_between(day_start, slot.start_at))
        end_minutes = round(minutes_between(day_start, slot.end_at))
        if end_minutes <= start_minutes:
            end_minutes += MINUTES_PER_DAY

        key = (slot.room_id, weekday, start_minutes)
        existing = by_key.get(key)
        if existing is None or end_minutes > existing.end_minutes:
            by_key[key] = HappyHourTemplate(weekday, start_minutes, end_minutes)

    result: Dict[Any, List[HappyHourTemplate]] = {}
    for (room_id, _, _), template in by_key.items():
        result.setdefault(room_id, []).append(template)

    for templates in result.values():
        templates.sort(key=lambda t: (t.weekday, t.start_minutes))

    return result


def expand(
    templates_by_room: Dict[Any, List[HappyHourTemplate]],
    range_start: datetime,
    range_end: datetime,
    tz: ZoneLike
) -> List[HappyHourInstance]:
    """
    Materialize templates on every business day touching [range_start, range_end).

    The walk starts one day early so that an overnight window opened the
    previous evening is still reported. Only instances intersecting the
    range are returned.
    """
    if range_end <= range_start:
        return []

    instances: List[HappyHourInstance] = []
    for day, day_start in iter_local_days(range_start, range_end, tz, lead_days=1):
        weekday = day.weekday()
        for room_id, templates in templates_by_room.items():
            for template in templates:
                if template.weekday != weekday:
                    continue

                start_at = day_start + timedelta(minutes=template.start_minutes)
                end_at = day_start + timedelta(minutes=template.end_minutes)
                if start_at < range_end and end_at > range_start:
                    instances.append(HappyHourInstance(room_id, start_at, end_at))

    instances.sort(key=lambda i: (i.start_at, str(i.room_id)))
    return instances


def templates_from_rules(rules: Iterable[HappyHourRule]) -> Dict[Any, List[HappyHourTemplate]]:
    result: Dict[Any, List[HappyHourTemplate]] = {}
    for rule in rules:
        result.setdefault(rule.room_id, []).append(
            HappyHourTemplate(rule.weekday, rule.start_minutes, rule.end_minutes)
        )
    return result


class HappyHourService:
    """
    Service for room happy-hour schedules.

    Rules are the stored form. Concrete instances are produced on demand.
    """

    # ==========================================================================
    # Reads
    # ==========================================================================

    def templates_for_rooms(self, rooms) -> Dict[Any, List[HappyHourTemplate]]:
        room_ids = [room.id for room in rooms]
        rules = HappyHourRule.objects.filter(room_id__in=room_ids)
        return templates_from_rules(rules)

    def expand_for_rooms(
        self,
        rooms,
        range_start: datetime,
        range_end: datetime,
        tz: ZoneLike
    ) -> List[HappyHourInstance]:
        return expand(self.templates_for_rooms(rooms), range_start, range_end, tz)

    def schedule_days(self, room) -> List[Dict[str, Any]]:
        """Per-weekday schedule view used by the owner's editor."""
        calendar_settings = CalendarSettings.for_studio(room.studio)
        hours = effective_opening_hours(room.studio, calendar_settings)

        longest: Dict[int, int] = {}
        for rule in HappyHourRule.objects.filter(room=room):
            if rule.end_minutes > longest.get(rule.weekday, -1):
                longest[rule.weekday] = rule.end_minutes

        days = []
        for weekday in range(7):
            is_open = open_range_for_weekday(weekday, hours) is not None
            end_minutes = longest.get(weekday)
            enabled = is_open and end_minutes is not None
            if enabled:
                end_time = minutes_to_time(end_minutes)
            else:
                end_time = hours[weekday].close_time if is_open else FALLBACK_END_TIME
            days.append({
                'weekday': weekday,
                'enabled': enabled,
                'end_time': end_time,
            })
        return days

    # ==========================================================================
    # Writes
    # ==========================================================================

    def _validate_days(self, days: List[Dict[str, Any]]):
        if not isinstance(days, (list, tuple)) or len(days) != 7:
            raise BookingValidationError("Schedule must contain exactly 7 days")

        weekdays = set()
        for day in days:
            weekday = day.get('weekday')
            if not isinstance(weekday, int) or weekday < 0 or weekday > 6:
                raise BookingValidationError(f"Invalid weekday: {weekday}")
            if weekday in weekdays:
                raise BookingValidationError(f"Weekday {weekday} listed twice")
            weekdays.add(weekday)

            if day.get('enabled') and minutes_from_time(day.get('end_time')) is None:
                raise BookingValidationError(f"Invalid end time for weekday {weekday}")

    @transaction.atomic
    def replace_schedule(
        self,
        room,
        days: List[Dict[str, Any]],
        created_by: uuid.UUID = None
    ) -> List[HappyHourRule]:
        """
        Replace the room's whole weekly schedule.

        Every enabled day gets one window from that weekday's opening time to
        the requested end time; disabled days are left empty.
        """
        self._validate_days(days)

        calendar_settings = CalendarSettings.for_studio(room.studio)
        hours = effective_opening_hours(room.studio, calendar_settings)

        HappyHourRule.objects.filter(room=room).delete()
        HappyHourSlot.objects.filter(room=room).delete()

        rules = []
        for day in sorted(days, key=lambda d: d['weekday']):
            if not day.get('enabled'):
                continue

            weekday = day['weekday']
            start_minutes = minutes_from_time(hours[weekday].open_time) or 0
            end_minutes = minutes_from_time(day['end_time'])
            if end_minutes <= start_minutes:
                end_minutes += MINUTES_PER_DAY

            rules.append(HappyHourRule(
                room=room,
                weekday=weekday,
                start_minutes=start_minutes,
                end_minutes=end_minutes,
                created_by=created_by,
            ))

        HappyHourRule.objects.bulk_create(rules)

        logger.info(
            f"Happy hour schedule replaced for room {room.id}: "
            f"{len(rules)} enabled days"
        )

        transaction.on_commit(lambda: self._publish_schedule_replaced(room, rules))
        return rules

    def _publish_schedule_replaced(self, room, rules):
        from apps.core.events import publish_happy_hour_schedule_replaced
        publish_happy_hour_schedule_replaced(room, rules)

    @transaction.atomic
    def set_slot(
        self,
        room,
        start_at: datetime,
        end_at: datetime,
        active: bool,
        created_by: uuid.UUID = None
    ) -> Optional[HappyHourRule]:
        """Turn a single weekly window on or off from one of its instances."""
        if end_at <= start_at:
            raise BookingValidationError("Happy hour must end after it starts")

        calendar_settings = CalendarSettings.for_studio(room.studio)

        slot = HappyHourInstance(room.id, start_at, end_at)
        template = compress_to_templates(
            [slot], calendar_settings.day_cutoff_hour, calendar_settings.timezone
        )[room.id][0]

        if not active:
            deleted, _ = HappyHourRule.objects.filter(
                room=room,
                weekday=template.weekday,
                start_minutes=template.start_minutes,
            ).delete()
            logger.info(f"Happy hour removed for room {room.id}: {deleted} rule(s)")
            return None

        rule, created = HappyHourRule.objects.update_or_create(
            room=room,
            weekday=template.weekday,
            start_minutes=template.start_minutes,
            defaults={
                'end_minutes': template.end_minutes,
                'created_by': created_by,
            },
        )
        logger.info(
            f"Happy hour {'created' if created else 'updated'} for room {room.id}: "
            f"weekday {rule.weekday}"
        )
        return rule

    @transaction.atomic
    def import_legacy_slots(self, room) -> List[HappyHourRule]:
        """Fold stored concrete slots of a room into rules and drop them."""
        calendar_settings = CalendarSettings.for_studio(room.studio)

        slots = list(HappyHourSlot.objects.filter(room=room))
        if not slots:
            return []

        templates = compress_to_templates(
            slots, calendar_settings.day_cutoff_hour, calendar_settings.timezone
        ).get(room.id, [])

        rules = []
        for template in templates:
            rule, _ = HappyHourRule.objects.update_or_create(
                room=room,
                weekday=template.weekday,
                start_minutes=template.start_minutes,
                defaults={'end_minutes': template.end_minutes},
            )
            rules.append(rule)

        HappyHourSlot.objects.filter(id__in=[slot.id for slot in slots]).delete()

        logger.info(
            f"Imported {len(slots)} happy hour slots for room {room.id} "
            f"into {len(rules)} rules"
        )
        return rules
