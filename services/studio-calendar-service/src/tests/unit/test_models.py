# services/studio-calendar-service/src/tests/unit/test_models.py
"""
Unit Tests for Studio Calendar Models

Tests for model methods, properties, and constraints.
"""

import uuid
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest
from django.db import IntegrityError, transaction

from apps.core.models import (
    Approved,
    CalendarBlock,
    CalendarSettings,
    HappyHourRule,
    Pending,
    Rejected,
    ReservationRequest,
)
from shared.common.authentication import TokenUser

TZ = ZoneInfo('Europe/Istanbul')


def local(day, hour):
    return datetime(2030, 1, day, hour, 0, tzinfo=TZ)


@pytest.mark.django_db
class TestStudioModel:
    """Tests for Studio ownership."""

    def test_owned_by_subject(self, studio, owner):
        assert studio.is_owned_by(owner)

    def test_owned_by_email_ignores_case(self, studio):
        user = TokenUser({'sub': str(uuid.uuid4()), 'email': 'Owner@Studio.TEST'})
        assert studio.is_owned_by(user)

    def test_not_owned_by_others(self, studio, stranger):
        assert not studio.is_owned_by(stranger)
        assert not studio.is_owned_by(None)


@pytest.mark.django_db
class TestCalendarSettingsModel:
    """Tests for CalendarSettings."""

    def test_for_studio_returns_unsaved_defaults(self, studio):
        calendar_settings = CalendarSettings.for_studio(studio)

        assert calendar_settings._state.adding
        assert calendar_settings.day_cutoff_hour == 4
        assert calendar_settings.timezone == 'Europe/Istanbul'
        assert not calendar_settings.is_auto_approval

    def test_for_studio_returns_stored_row(self, calendar_settings, studio):
        assert CalendarSettings.for_studio(studio).id == calendar_settings.id

    def test_cutoff_minutes(self, calendar_settings):
        calendar_settings.booking_cutoff_value = 2
        assert calendar_settings.cutoff_minutes == 120

        calendar_settings.booking_cutoff_unit = CalendarSettings.CutoffUnit.DAYS
        assert calendar_settings.cutoff_minutes == 2 * 24 * 60

    def test_one_row_per_studio(self, calendar_settings, studio):
        with pytest.raises(IntegrityError), transaction.atomic():
            CalendarSettings.objects.create(studio=studio)


@pytest.mark.django_db
class TestCalendarBlockModel:
    """Tests for CalendarBlock."""

    def test_duration_and_blocking(self, create_block):
        block = create_block(local(8, 14), local(8, 16))

        assert block.duration_minutes == 120
        assert block.is_blocking

    def test_cancel_releases_reservation_block(self, create_block):
        block = create_block(
            local(8, 14),
            local(8, 16),
            type=CalendarBlock.BlockType.RESERVATION,
            status=CalendarBlock.Status.APPROVED,
        )

        block.cancel()
        block.refresh_from_db()

        assert block.status == CalendarBlock.Status.CANCELLED
        assert not block.is_blocking

    def test_manual_block_cannot_be_cancelled(self, create_block):
        block = create_block(local(8, 14), local(8, 16))

        with pytest.raises(ValueError):
            block.cancel()

    def test_end_must_follow_start(self, create_block):
        with pytest.raises(IntegrityError), transaction.atomic():
            create_block(local(8, 16), local(8, 14))

    def test_get_in_range(self, studio, room, create_block):
        inside = create_block(local(8, 14), local(8, 16))
        create_block(local(10, 14), local(10, 16))

        found = CalendarBlock.get_in_range(studio.id, local(8, 0), local(9, 0))
        assert list(found) == [inside]


@pytest.mark.django_db
class TestReservationRequestModel:
    """Tests for the reservation request lifecycle."""

    def test_new_request_is_pending(self, create_request):
        request = create_request(local(8, 14))

        assert request.state == Pending()
        assert request.studio_unread
        assert request.end_at - request.start_at == timedelta(hours=2)

    def test_approve_links_block(self, create_request, create_block, owner_id):
        request = create_request(local(8, 14))
        block = create_block(
            local(8, 14),
            local(8, 16),
            type=CalendarBlock.BlockType.RESERVATION,
            status=CalendarBlock.Status.APPROVED,
        )

        request.approve(block, decided_by=owner_id)

        assert request.state == Approved(block_id=block.id)
        assert request.decided_by == owner_id
        assert request.decided_at is not None
        assert request.user_unread and not request.studio_unread

    def test_approve_requires_block(self, create_request):
        request = create_request(local(8, 14))

        with pytest.raises(ValueError):
            request.approve(None)

    def test_terminal_states_do_not_move(self, create_request):
        request = create_request(local(8, 14))
        request.reject()

        assert request.state == Rejected()
        with pytest.raises(ValueError):
            request.reject()
        with pytest.raises(ValueError):
            request.approve(object())

    def test_approved_status_needs_block(self, create_request):
        with pytest.raises(IntegrityError), transaction.atomic():
            create_request(local(8, 14), status=ReservationRequest.Status.APPROVED)


@pytest.mark.django_db
class TestHappyHourRuleModel:

    def test_one_rule_per_start(self, room):
        HappyHourRule.objects.create(room=room, weekday=1, start_minutes=1080, end_minutes=1200)

        with pytest.raises(IntegrityError), transaction.atomic():
            HappyHourRule.objects.create(room=room, weekday=1, start_minutes=1080, end_minutes=1260)

    def test_window_must_have_length(self, room):
        with pytest.raises(IntegrityError), transaction.atomic():
            HappyHourRule.objects.create(room=room, weekday=1, start_minutes=1080, end_minutes=1080)
