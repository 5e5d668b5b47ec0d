# services/studio-calendar-service/src/tests/integration/test_api.py
"""
Integration Tests for Studio Calendar API

Tests API endpoints with full request/response cycle.
"""

import uuid
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from rest_framework import status
from rest_framework.throttling import ScopedRateThrottle

from apps.core.models import CalendarBlock, CalendarSettings, HappyHourRule, HappyHourSlot, ReservationRequest
from apps.core.services import ReservationService

TZ = ZoneInfo('Europe/Istanbul')


def local(day, hour, minute=0):
    return datetime(2030, 1, day, hour, minute, tzinfo=TZ)


def iso(day, hour):
    return local(day, hour).isoformat()


@pytest.fixture
def reservation_data(studio, room):
    return {
        'studio_id': str(studio.id),
        'room_id': str(room.id),
        'start_at': iso(8, 14),
        'hours': 2,
        'requester_name': 'Ali Veli',
        'requester_phone': '05551234567',
        'requester_email': 'ali@example.com',
    }


@pytest.mark.django_db
class TestReservationRequestAPI:
    """Integration tests for reservation request endpoints."""

    url = '/api/v1/reservation-requests/'

    def test_guest_creates_request(self, api_client, reservation_data, calendar_settings):
        response = api_client.post(self.url, reservation_data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == 'pending'
        assert response.data['total_price'] == '200.00'
        assert response.data['currency'] == 'TRY'
        assert response.data['calendar_block_id'] is None

    def test_overlap_returns_conflict(self, api_client, reservation_data, calendar_settings):
        api_client.post(self.url, reservation_data, format='json')
        response = api_client.post(self.url, reservation_data, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['error'] == 'BOOKING_CONFLICT'
        assert response.data['conflicts'][0]['kind'] == 'reservation_request'

    def test_outside_opening_hours(self, api_client, reservation_data, calendar_settings):
        reservation_data.update(start_at=iso(8, 20), hours=3)

        response = api_client.post(self.url, reservation_data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'OUTSIDE_OPENING_HOURS'

    def test_invalid_payload(self, api_client, reservation_data):
        reservation_data['hours'] = 0

        response = api_client.post(self.url, reservation_data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['success'] is False
        assert response.data['error']['code'] == 'VALIDATION_ERROR'
        assert 'hours' in response.data['error']['details']

    def test_auto_approval_requires_login(self, api_client, reservation_data, calendar_settings):
        calendar_settings.booking_approval_mode = CalendarSettings.ApprovalMode.AUTO
        calendar_settings.save()

        response = api_client.post(self.url, reservation_data, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_signed_in_auto_approval(self, customer_client, studio, room, calendar_settings):
        calendar_settings.booking_approval_mode = CalendarSettings.ApprovalMode.AUTO
        calendar_settings.save()

        response = customer_client.post(self.url, {
            'studio_id': str(studio.id),
            'room_id': str(room.id),
            'start_at': iso(8, 14),
            'hours': 1,
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == 'approved'
        assert response.data['requester_name'] == 'Deniz Kaya'
        assert CalendarBlock.objects.filter(id=response.data['calendar_block_id']).exists()

    def test_signed_in_manual_request(self, customer_client, customer_id, studio, room, calendar_settings):
        response = customer_client.post(self.url, {
            'studio_id': str(studio.id),
            'room_id': str(room.id),
            'start_at': iso(8, 14),
            'hours': 2,
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == 'pending'
        assert response.data['requester_id'] == str(customer_id)
        assert response.data['requester_email'] == 'musician@example.com'
        assert response.data['requester_phone'] == '+905551112233'

    def test_create_throttle_is_per_user(
        self, customer_client, stranger_client, reservation_data, calendar_settings, monkeypatch
    ):
        monkeypatch.setattr(ScopedRateThrottle, 'THROTTLE_RATES', {'reservation_create': '1/hour'})

        first = customer_client.post(self.url, reservation_data, format='json')
        reservation_data['start_at'] = iso(9, 14)
        second = customer_client.post(self.url, reservation_data, format='json')
        reservation_data['start_at'] = iso(10, 14)
        other_user = stranger_client.post(self.url, reservation_data, format='json')

        assert first.status_code == status.HTTP_201_CREATED
        assert second.status_code == status.HTTP_429_TOO_MANY_REQUESTS
        assert other_user.status_code == status.HTTP_201_CREATED

    def test_decision_race_keeps_approval(self, owner_client, create_request, calendar_settings, monkeypatch):
        request = create_request(local(8, 14))
        stale = ReservationService().get_request(request.id)
        approved = owner_client.post(f'{self.url}{request.id}/approve/')

        monkeypatch.setattr(ReservationService, 'get_request', lambda self, request_id: stale)
        response = owner_client.post(f'{self.url}{request.id}/reject/')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'INVALID_STATE'
        request.refresh_from_db()
        assert request.status == ReservationRequest.Status.APPROVED
        assert str(request.calendar_block_id) == approved.data['calendar_block_id']

    def test_approved_block_cannot_be_cancelled(self, owner_client, create_request, calendar_settings):
        request = create_request(local(8, 14))
        block_id = owner_client.post(f'{self.url}{request.id}/approve/').data['calendar_block_id']

        response = owner_client.patch(
            f'/api/v1/calendar-blocks/{block_id}/', {'status': 'cancelled'}, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'INVALID_STATE'
        assert CalendarBlock.objects.get(id=block_id).is_blocking

    def test_list_requires_login(self, api_client):
        response = api_client.get(self.url)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_owner_lists_studio_requests(self, owner_client, studio, create_request):
        create_request(local(8, 14))
        create_request(local(9, 14), status=ReservationRequest.Status.REJECTED)

        response = owner_client.get(self.url, {'studio_id': str(studio.id)})
        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 2

        response = owner_client.get(self.url, {'studio_id': str(studio.id), 'status': 'pending'})
        assert response.data['count'] == 1

    def test_stranger_cannot_list_studio(self, stranger_client, studio):
        response = stranger_client.get(self.url, {'studio_id': str(studio.id)})
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_bad_studio_id(self, owner_client):
        response = owner_client.get(self.url, {'studio_id': 'not-a-uuid'})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_customer_lists_own_requests(self, customer_client, customer_id, create_request):
        mine = create_request(local(8, 14), requester_id=customer_id)
        create_request(local(9, 14))

        response = customer_client.get(self.url)

        assert response.status_code == status.HTTP_200_OK
        assert [item['id'] for item in response.data['results']] == [str(mine.id)]

    def test_retrieve(self, customer_client, stranger_client, customer_id, create_request):
        request = create_request(local(8, 14), requester_id=customer_id)

        assert customer_client.get(f'{self.url}{request.id}/').status_code == status.HTTP_200_OK
        assert stranger_client.get(f'{self.url}{request.id}/').status_code == status.HTTP_403_FORBIDDEN

    def test_owner_approves(self, owner_client, create_request, calendar_settings):
        request = create_request(local(8, 14))

        response = owner_client.post(f'{self.url}{request.id}/approve/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'approved'
        assert response.data['calendar_block_id'] is not None

    def test_stranger_cannot_approve(self, stranger_client, create_request):
        request = create_request(local(8, 14))

        response = stranger_client.post(f'{self.url}{request.id}/approve/')
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_reject_then_approve(self, owner_client, create_request):
        request = create_request(local(8, 14))

        response = owner_client.post(f'{self.url}{request.id}/reject/')
        assert response.data['status'] == 'rejected'

        response = owner_client.post(f'{self.url}{request.id}/approve/')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'INVALID_STATE'

    def test_mark_read(self, owner_client, create_request):
        request = create_request(local(8, 14))

        response = owner_client.post(f'{self.url}{request.id}/read/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['studio_unread'] is False

    def test_unknown_request(self, owner_client):
        response = owner_client.post(f'{self.url}{uuid.uuid4()}/approve/')
        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
class TestCalendarBlockAPI:
    """Integration tests for calendar block endpoints."""

    url = '/api/v1/calendar-blocks/'

    def block_data(self, studio, room, start_hour=14, end_hour=16):
        return {
            'studio_id': str(studio.id),
            'room_id': str(room.id),
            'start_at': iso(8, start_hour),
            'end_at': iso(8, end_hour),
            'title': 'Maintenance',
        }

    def test_create_and_list(self, owner_client, studio, room):
        response = owner_client.post(self.url, self.block_data(studio, room), format='json')
        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['type'] == 'manual_block'

        response = owner_client.get(self.url, {'room_id': str(room.id)})
        assert response.data['count'] == 1

    def test_overlap(self, owner_client, studio, room, create_block):
        create_block(local(8, 15), local(8, 17))

        response = owner_client.post(self.url, self.block_data(studio, room), format='json')
        assert response.status_code == status.HTTP_409_CONFLICT

    def test_end_before_start(self, owner_client, studio, room):
        response = owner_client.post(self.url, self.block_data(studio, room, 16, 14), format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_stranger_sees_nothing(self, stranger_client, studio, room, create_block):
        block = create_block(local(8, 14), local(8, 16))

        assert stranger_client.get(self.url).data['count'] == 0
        assert stranger_client.delete(f'{self.url}{block.id}/').status_code == status.HTTP_404_NOT_FOUND

    def test_stranger_cannot_create(self, stranger_client, studio, room):
        response = stranger_client.post(self.url, self.block_data(studio, room), format='json')
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_range_filter(self, owner_client, create_block):
        create_block(local(8, 14), local(8, 16))
        create_block(local(20, 14), local(20, 16))

        response = owner_client.get(self.url, {'start': iso(7, 0), 'end': iso(14, 0)})
        assert response.data['count'] == 1

    def test_patch(self, owner_client, create_block):
        block = create_block(local(8, 14), local(8, 16))

        response = owner_client.patch(
            f'{self.url}{block.id}/', {'end_at': iso(8, 18)}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['duration_minutes'] == 240

    def test_delete(self, owner_client, create_block):
        block = create_block(local(8, 14), local(8, 16))

        response = owner_client.delete(f'{self.url}{block.id}/')

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not CalendarBlock.objects.exists()


@pytest.mark.django_db
class TestStudioCalendarAPI:
    """Integration tests for calendar view, summary and settings."""

    def test_calendar_view(self, owner_client, studio, room, calendar_settings, create_block):
        HappyHourRule.objects.create(room=room, weekday=1, start_minutes=1080, end_minutes=1200)
        create_block(local(8, 14), local(8, 16))

        response = owner_client.get(
            f'/api/v1/studios/{studio.id}/calendar/',
            {'start': iso(7, 0), 'end': iso(14, 0), 'include_summary': 'true'},
        )

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data['blocks']) == 1
        assert len(response.data['expanded_happy_hours']) == 1
        assert 'week_occupancy' in response.data['summary']

    def test_calendar_view_requires_range(self, owner_client, studio):
        response = owner_client.get(f'/api/v1/studios/{studio.id}/calendar/')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_calendar_view_is_owner_only(self, stranger_client, studio):
        response = stranger_client.get(
            f'/api/v1/studios/{studio.id}/calendar/',
            {'start': iso(7, 0), 'end': iso(14, 0)},
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_summary(self, owner_client, studio, room, calendar_settings):
        response = owner_client.get(f'/api/v1/studios/{studio.id}/summary/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['currency'] == 'TRY'
        assert response.data['month_revenue'] == '0.00'

    def test_unknown_studio(self, owner_client):
        response = owner_client.get(f'/api/v1/studios/{uuid.uuid4()}/summary/')
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_settings_read_defaults(self, owner_client, studio):
        response = owner_client.get(f'/api/v1/studios/{studio.id}/calendar-settings/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['booking_approval_mode'] == 'manual'
        assert response.data['effective_weekly_hours'][0]['open_time'] == '10:00'

    def test_settings_update(self, owner_client, studio):
        response = owner_client.patch(
            f'/api/v1/studios/{studio.id}/calendar-settings/',
            {'happy_hour_enabled': True, 'slot_step_minutes': 30},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['happy_hour_enabled'] is True
        assert CalendarSettings.objects.get(studio=studio).slot_step_minutes == 30

    def test_settings_invalid_value(self, owner_client, studio):
        response = owner_client.patch(
            f'/api/v1/studios/{studio.id}/calendar-settings/',
            {'slot_step_minutes': 45},
            format='json',
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'VALIDATION_ERROR'


@pytest.mark.django_db
class TestHappyHourAPI:
    """Integration tests for happy-hour endpoints."""

    def schedule(self, **enabled):
        return {'days': [
            {
                'weekday': weekday,
                'enabled': f'd{weekday}' in enabled,
                'end_time': enabled.get(f'd{weekday}', '22:00'),
            }
            for weekday in range(7)
        ]}

    def test_replace_and_read_schedule(self, owner_client, room, calendar_settings):
        url = f'/api/v1/rooms/{room.id}/happy-hours/schedule/'

        response = owner_client.put(url, self.schedule(d1='20:00'), format='json')
        assert response.status_code == status.HTTP_200_OK
        assert len(response.data['rules']) == 1

        response = owner_client.get(url)
        assert response.data['days'][1] == {'weekday': 1, 'enabled': True, 'end_time': '20:00'}
        assert response.data['rules'][0]['start_time'] == '10:00'

    def test_schedule_needs_every_weekday(self, owner_client, room):
        payload = self.schedule(d1='20:00')
        payload['days'][0]['weekday'] = 1

        response = owner_client.put(
            f'/api/v1/rooms/{room.id}/happy-hours/schedule/', payload, format='json'
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_schedule_is_owner_only(self, stranger_client, room):
        response = stranger_client.get(f'/api/v1/rooms/{room.id}/happy-hours/schedule/')
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_toggle(self, owner_client, room, calendar_settings):
        url = f'/api/v1/rooms/{room.id}/happy-hours/toggle/'
        window = {'start_at': iso(8, 18), 'end_at': iso(8, 20)}

        response = owner_client.post(url, {**window, 'active': True}, format='json')
        assert response.data['active'] is True
        assert response.data['rule']['weekday'] == 1

        response = owner_client.post(url, {**window, 'active': False}, format='json')
        assert response.data == {'active': False}
        assert not HappyHourRule.objects.exists()

    def test_import_legacy_slots(self, owner_client, room, calendar_settings):
        HappyHourSlot.objects.create(room=room, start_at=local(8, 18), end_at=local(8, 20))

        response = owner_client.post(f'/api/v1/rooms/{room.id}/happy-hours/import/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['imported'] == 1


@pytest.mark.django_db
class TestPublicAPI:
    """Integration tests for anonymous endpoints."""

    def test_price_estimate(self, api_client, room, calendar_settings):
        calendar_settings.happy_hour_enabled = True
        calendar_settings.save()
        HappyHourRule.objects.create(room=room, weekday=1, start_minutes=1080, end_minutes=1200)

        response = api_client.post('/api/v1/price-estimate/', {
            'room_id': str(room.id),
            'start_at': iso(8, 17),
            'hours': 3,
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_price'] == '200.00'
        assert response.data['happy_hours'] == 2
        assert response.data['currency'] == 'TRY'

    def test_price_estimate_without_rate(self, api_client, studio, calendar_settings):
        from apps.core.models import Room

        bare = Room.objects.create(studio=studio, name='Bare')
        response = api_client.post('/api/v1/price-estimate/', {
            'room_id': str(bare.id),
            'start_at': iso(8, 17),
            'hours': 1,
        }, format='json')

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_availability(self, api_client, room, other_room, calendar_settings, create_block):
        create_block(local(8, 14), local(8, 16))

        response = api_client.get('/api/v1/availability/', {
            'start': iso(8, 15),
            'hours': 1,
            'city': 'Istanbul',
        })

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['id'] == str(other_room.id)

    def test_health(self, api_client):
        response = api_client.get('/health/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['service'] == 'studio-calendar-service'
