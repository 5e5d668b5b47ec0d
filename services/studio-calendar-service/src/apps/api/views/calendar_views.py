# services/studio-calendar-service/src/apps/api/views/calendar_views.py
"""
Calendar API Views

Owner-facing calendar: blocks, settings, the combined calendar view and
the occupancy summary.
"""

import uuid
import logging

from django.db.models import Q
from rest_framework import viewsets, status, filters
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from django_filters.rest_framework import DjangoFilterBackend

from apps.core.models import CalendarBlock
from apps.core.services import CalendarService, CalendarServiceError, OccupancyService
from apps.core.services.ownership import get_owned_studio, get_studio
from apps.api.serializers import (
    CalendarBlockSerializer,
    CalendarBlockCreateSerializer,
    CalendarBlockUpdateSerializer,
    CalendarQuerySerializer,
    CalendarSettingsSerializer,
    CalendarSettingsUpdateSerializer,
    CalendarViewSerializer,
    OccupancySummarySerializer,
)
from .errors import service_error_response
from .filters import CalendarBlockFilter

logger = logging.getLogger(__name__)


def owned_studio_q(user, prefix: str = '') -> Q:
    """Filter matching rows of studios the user owns."""
    query = Q(**{f'{prefix}owner_email__iexact': user.email or ''})
    try:
        query |= Q(**{f'{prefix}owner_id': uuid.UUID(str(user.id))})
    except (TypeError, ValueError):
        pass
    return query


class CalendarBlockViewSet(viewsets.ModelViewSet):
    """
    ViewSet for calendar blocks.

    Lists and manages the blocks of the caller's studios. Writes go through
    the calendar service so overlap checks always apply.
    """

    serializer_class = CalendarBlockSerializer
    permission_classes = [IsAuthenticated]
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = CalendarBlockFilter
    ordering_fields = ['start_at', 'created_at']
    ordering = ['start_at']
    lookup_value_regex = '[0-9a-f-]{36}'

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.calendar_service = CalendarService()

    def get_queryset(self):
        return CalendarBlock.objects.filter(
            owned_studio_q(self.request.user, prefix='studio__')
        ).select_related('room')

    def create(self, request, *args, **kwargs):
        serializer = CalendarBlockCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data

        try:
            studio = get_studio(data['studio_id'])
            block = self.calendar_service.create_block(
                studio,
                room_id=data['room_id'],
                start_at=data['start_at'],
                end_at=data['end_at'],
                actor=request.user,
                type=data['type'],
                title=data.get('title', ''),
                note=data.get('note', ''),
            )
        except CalendarServiceError as e:
            return service_error_response(e)

        return Response(CalendarBlockSerializer(block).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        instance = self.get_object()

        serializer = CalendarBlockUpdateSerializer(data=request.data, partial=kwargs.pop('partial', False))
        serializer.is_valid(raise_exception=True)

        try:
            block = self.calendar_service.update_block(
                instance.id,
                request.user,
                **serializer.validated_data
            )
        except CalendarServiceError as e:
            return service_error_response(e)

        return Response(CalendarBlockSerializer(block).data)

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()

        try:
            self.calendar_service.delete_block(instance.id, request.user)
        except CalendarServiceError as e:
            return service_error_response(e)

        return Response(status=status.HTTP_204_NO_CONTENT)


class StudioCalendarView(APIView):
    """Blocks and happy hours of a studio's rooms for a date range."""

    permission_classes = [IsAuthenticated]

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.calendar_service = CalendarService()

    def get(self, request, studio_id):
        query = CalendarQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        params = query.validated_data

        try:
            studio = get_owned_studio(studio_id, request.user)
            entries = self.calendar_service.list_calendar_entries(
                studio,
                range_start=params['start'],
                range_end=params['end'],
                room_ids=params.get('room_ids') or None,
                include_blocks=params['include_blocks'],
                include_happy_hours=params['include_happy_hours'],
                include_summary=params['include_summary'],
            )
        except CalendarServiceError as e:
            return service_error_response(e)

        return Response(CalendarViewSerializer(entries).data)


class OccupancySummaryView(APIView):
    """Current week and month occupancy and revenue of a studio."""

    permission_classes = [IsAuthenticated]

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.occupancy_service = OccupancyService()

    def get(self, request, studio_id):
        try:
            studio = get_owned_studio(studio_id, request.user)
        except CalendarServiceError as e:
            return service_error_response(e)

        summary = self.occupancy_service.get_summary(studio)
        return Response(OccupancySummarySerializer(summary).data)


class CalendarSettingsView(APIView):
    """Read and update a studio's calendar settings."""

    permission_classes = [IsAuthenticated]

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.calendar_service = CalendarService()

    def get(self, request, studio_id):
        try:
            studio = get_owned_studio(studio_id, request.user)
        except CalendarServiceError as e:
            return service_error_response(e)

        calendar_settings = self.calendar_service.get_settings(studio)
        return Response(CalendarSettingsSerializer(calendar_settings).data)

    def patch(self, request, studio_id):
        serializer = CalendarSettingsUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        try:
            studio = get_owned_studio(studio_id, request.user)
            calendar_settings = self.calendar_service.update_settings(
                studio, **serializer.validated_data
            )
        except CalendarServiceError as e:
            return service_error_response(e)

        return Response(CalendarSettingsSerializer(calendar_settings).data)
