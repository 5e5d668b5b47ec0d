# services/studio-calendar-service/src/tests/conftest.py
"""
Pytest Configuration and Fixtures

Provides common fixtures for studio calendar service tests.
"""

import uuid
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from shared.common.authentication import JWTTokenGenerator, TokenUser

STUDIO_TZ = ZoneInfo('Europe/Istanbul')

DAILY_10_TO_22 = [
    {'open': True, 'open_time': '10:00', 'close_time': '22:00'}
    for _ in range(7)
]


def local(year, month, day, hour=0, minute=0):
    """Wall-clock time in the studio's zone (Istanbul, UTC+3, no DST)."""
    return datetime(year, month, day, hour, minute, tzinfo=STUDIO_TZ)


@pytest.fixture(autouse=True)
def clear_cache():
    """Keep cached summaries from leaking between tests."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def published_events():
    """Events captured by the in-memory event backend."""
    from apps.core.events import event_publisher

    event_publisher.clear()
    yield event_publisher.published_events
    event_publisher.clear()


# =============================================================================
# Identities
# =============================================================================

@pytest.fixture
def owner_id():
    return uuid.uuid4()


@pytest.fixture
def customer_id():
    return uuid.uuid4()


@pytest.fixture
def owner(owner_id):
    """Token user owning the test studio."""
    return TokenUser({
        'sub': str(owner_id),
        'email': 'owner@studio.test',
        'name': 'Studio Owner',
    })


@pytest.fixture
def customer(customer_id):
    """Signed-in customer with a full profile."""
    return TokenUser({
        'sub': str(customer_id),
        'email': 'musician@example.com',
        'name': 'Deniz Kaya',
        'phone': '+905551112233',
    })


@pytest.fixture
def stranger():
    """Signed-in user owning nothing."""
    return TokenUser({
        'sub': str(uuid.uuid4()),
        'email': 'stranger@example.com',
        'name': 'Someone Else',
    })


# =============================================================================
# Studio
# =============================================================================

@pytest.fixture
def studio(db, owner_id):
    from apps.core.models import Studio

    return Studio.objects.create(
        name='Kadikoy Rehearsal',
        owner_id=owner_id,
        owner_email='owner@studio.test',
        city='Istanbul',
        district='Kadikoy',
        opening_hours=DAILY_10_TO_22,
    )


@pytest.fixture
def room(studio):
    from apps.core.models import Room

    return Room.objects.create(
        studio=studio,
        name='Room A',
        hourly_rate='100',
        happy_hour_rate='50',
    )


@pytest.fixture
def other_room(studio):
    from apps.core.models import Room

    return Room.objects.create(
        studio=studio,
        name='Room B',
        hourly_rate='1.500',
    )


@pytest.fixture
def calendar_settings(studio):
    from apps.core.models import CalendarSettings

    return CalendarSettings.objects.create(
        studio=studio,
        day_cutoff_hour=4,
        timezone='Europe/Istanbul',
    )


@pytest.fixture
def create_block(studio, room):
    """Factory fixture for creating calendar blocks."""
    from apps.core.models import CalendarBlock

    def _create_block(start_at, end_at, **kwargs):
        defaults = {
            'studio': studio,
            'room': room,
            'start_at': start_at,
            'end_at': end_at,
            'type': CalendarBlock.BlockType.MANUAL_BLOCK,
        }
        defaults.update(kwargs)
        return CalendarBlock.objects.create(**defaults)

    return _create_block


@pytest.fixture
def create_request(studio, room):
    """Factory fixture for creating reservation requests directly."""
    from apps.core.models import ReservationRequest

    def _create_request(start_at, hours=2, **kwargs):
        from datetime import timedelta

        defaults = {
            'studio': studio,
            'room': room,
            'requester_name': 'Ali Veli',
            'requester_phone': '05551234567',
            'requester_email': 'ali@example.com',
            'start_at': start_at,
            'end_at': start_at + timedelta(hours=hours),
            'hours': hours,
        }
        defaults.update(kwargs)
        return ReservationRequest.objects.create(**defaults)

    return _create_request


# =============================================================================
# API Clients
# =============================================================================

def _client_for(user_id, email, name=None, phone=None):
    client = APIClient()
    token = JWTTokenGenerator.generate_access_token(
        user_id=user_id,
        email=email,
        name=name,
        phone=phone,
    )
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
    return client


@pytest.fixture
def api_client():
    """Anonymous API client."""
    return APIClient()


@pytest.fixture
def owner_client(owner_id):
    return _client_for(owner_id, 'owner@studio.test', name='Studio Owner')


@pytest.fixture
def customer_client(customer_id):
    return _client_for(
        customer_id, 'musician@example.com', name='Deniz Kaya', phone='+905551112233'
    )


@pytest.fixture
def stranger_client():
    return _client_for(uuid.uuid4(), 'stranger@example.com', name='Someone Else')
