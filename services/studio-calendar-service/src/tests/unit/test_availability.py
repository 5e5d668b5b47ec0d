# services/studio-calendar-service/src/tests/unit/test_availability.py
"""
Unit Tests for Availability

Overlap rules for blocks and requests, and room search.
"""

from datetime import datetime
from types import SimpleNamespace
from zoneinfo import ZoneInfo

import pytest

from apps.core.models import CalendarBlock, Room
from apps.core.services import AvailabilityService
from apps.core.services.availability_service import is_blocking, overlaps

TZ = ZoneInfo('Europe/Istanbul')


def local(day, hour, minute=0):
    return datetime(2030, 1, day, hour, minute, tzinfo=TZ)


class TestBlockingRules:

    @pytest.mark.parametrize('entry_type, status, expected', [
        ('manual_block', None, True),
        ('manual_block', 'cancelled', True),
        ('Manuel Blok', None, True),
        ('reservation', 'approved', True),
        ('reservation', None, True),
        ('reservation', 'cancelled', False),
        ('rezervasyon', 'canceled', False),
        ('note', None, False),
    ])
    def test_is_blocking(self, entry_type, status, expected):
        assert is_blocking(SimpleNamespace(type=entry_type, status=status)) is expected

    def test_touching_intervals_do_not_overlap(self):
        assert not overlaps(local(8, 14), local(8, 16), local(8, 16), local(8, 18))
        assert overlaps(local(8, 14), local(8, 16), local(8, 15), local(8, 18))


@pytest.mark.django_db
class TestAvailabilityService:
    """Tests for AvailabilityService."""

    def setup_method(self):
        self.service = AvailabilityService()

    def test_manual_block_conflicts(self, room, create_block):
        block = create_block(local(8, 14), local(8, 16))

        conflicts = self.service.find_conflicts(room.id, local(8, 15), local(8, 17))

        assert len(conflicts) == 1
        assert conflicts[0]['kind'] == 'calendar_block'
        assert conflicts[0]['id'] == str(block.id)

    def test_adjacent_block_is_free(self, room, create_block):
        create_block(local(8, 14), local(8, 16))

        assert not self.service.has_conflict(room.id, local(8, 16), local(8, 18))
        assert not self.service.has_conflict(room.id, local(8, 12), local(8, 14))

    def test_cancelled_reservation_block_is_free(self, room, create_block):
        create_block(
            local(8, 14),
            local(8, 16),
            type=CalendarBlock.BlockType.RESERVATION,
            status=CalendarBlock.Status.CANCELLED,
        )

        assert not self.service.has_conflict(room.id, local(8, 14), local(8, 16))

    def test_pending_request_blocks_until_rejected(self, room, create_request):
        request = create_request(local(8, 14), hours=2)
        assert self.service.has_conflict(room.id, local(8, 15), local(8, 16))

        request.reject()
        assert not self.service.has_conflict(room.id, local(8, 15), local(8, 16))

    def test_requests_can_be_left_out(self, room, create_request):
        create_request(local(8, 14), hours=2)

        assert not self.service.find_conflicts(
            room.id, local(8, 14), local(8, 16), include_requests=False
        )

    def test_excluded_ids_are_ignored(self, room, create_block, create_request):
        block = create_block(local(8, 14), local(8, 16))
        request = create_request(local(8, 16), hours=1)

        assert not self.service.find_conflicts(
            room.id,
            local(8, 14),
            local(8, 17),
            exclude_block_id=block.id,
            exclude_request_id=request.id,
        )

    def test_other_rooms_do_not_conflict(self, room, other_room, create_block):
        create_block(local(8, 14), local(8, 16))
        assert not self.service.has_conflict(other_room.id, local(8, 14), local(8, 16))

    def test_find_available_rooms(self, room, other_room, create_block, calendar_settings):
        create_block(local(8, 14), local(8, 16))

        available = self.service.find_available_rooms(local(8, 15), local(8, 17))
        assert [r.id for r in available] == [other_room.id]

    def test_find_available_rooms_respects_opening_hours(self, room, calendar_settings):
        assert self.service.find_available_rooms(local(8, 21), local(8, 23)) == []
        assert self.service.find_available_rooms(local(8, 20), local(8, 22)) == [room]

    def test_find_available_rooms_filters_location(self, room, calendar_settings):
        assert self.service.find_available_rooms(local(8, 12), local(8, 13), city='istanbul') == [room]
        assert self.service.find_available_rooms(local(8, 12), local(8, 13), city='Ankara') == []
        assert self.service.find_available_rooms(
            local(8, 12), local(8, 13), district='Besiktas'
        ) == []

    def test_inactive_rooms_are_skipped(self, room, calendar_settings):
        Room.objects.filter(id=room.id).update(is_active=False)
        assert self.service.find_available_rooms(local(8, 12), local(8, 13)) == []
