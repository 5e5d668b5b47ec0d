# services/studio-calendar-service/src/apps/api/views/filters.py
"""
API Filters

Django Filter classes for the calendar API.
"""

import django_filters

from apps.core.models import CalendarBlock, ReservationRequest


class ReservationRequestFilter(django_filters.FilterSet):
    """Filter for reservation request lists."""

    status = django_filters.ChoiceFilter(
        choices=ReservationRequest.Status.choices
    )
    room_id = django_filters.UUIDFilter()
    start_after = django_filters.DateTimeFilter(
        field_name='start_at',
        lookup_expr='gte'
    )
    start_before = django_filters.DateTimeFilter(
        field_name='start_at',
        lookup_expr='lt'
    )
    unread = django_filters.BooleanFilter(
        field_name='studio_unread'
    )

    class Meta:
        model = ReservationRequest
        fields = ['status', 'room_id']


class CalendarBlockFilter(django_filters.FilterSet):
    """Filter for calendar block lists."""

    studio_id = django_filters.UUIDFilter()
    room_id = django_filters.UUIDFilter()
    type = django_filters.ChoiceFilter(
        choices=CalendarBlock.BlockType.choices
    )

    # Blocks intersecting [start, end)
    start = django_filters.IsoDateTimeFilter(
        field_name='end_at',
        lookup_expr='gt'
    )
    end = django_filters.IsoDateTimeFilter(
        field_name='start_at',
        lookup_expr='lt'
    )

    class Meta:
        model = CalendarBlock
        fields = ['studio_id', 'room_id', 'type']
