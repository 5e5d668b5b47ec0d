# services/studio-calendar-service/src/apps/api/views/pricing_views.py
"""
Pricing and Availability API Views

Public price estimates and room search.
"""

import logging
from datetime import timedelta

from django.conf import settings
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.models import CalendarSettings
from apps.core.services import AvailabilityService, CalendarServiceError, PricingService
from apps.core.services.ownership import get_room
from apps.api.serializers import (
    AvailabilityQuerySerializer,
    AvailableRoomSerializer,
    PriceEstimateResultSerializer,
    PriceEstimateSerializer,
)
from .errors import service_error_response

logger = logging.getLogger(__name__)


class PriceEstimateView(APIView):
    """Price of a room for an interval, with the happy-hour split."""

    permission_classes = [AllowAny]

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.pricing_service = PricingService()

    def post(self, request):
        serializer = PriceEstimateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data

        try:
            room = get_room(data['room_id'])
            quote = self.pricing_service.quote(
                room,
                CalendarSettings.for_studio(room.studio),
                data['start_at'],
                data['hours'],
            )
        except CalendarServiceError as e:
            return service_error_response(e)

        quote['currency'] = settings.RESERVATION_CURRENCY
        return Response(PriceEstimateResultSerializer(quote).data)


class AvailabilitySearchView(APIView):
    """Rooms that are open and free for a whole interval."""

    permission_classes = [AllowAny]

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.availability_service = AvailabilityService()

    def get(self, request):
        query = AvailabilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        params = query.validated_data
        start = params['start']
        end = start + timedelta(hours=params['hours'])

        try:
            rooms = self.availability_service.find_available_rooms(
                start,
                end,
                city=params.get('city') or None,
                district=params.get('district') or None,
            )
        except CalendarServiceError as e:
            return service_error_response(e)

        return Response({
            'start': start.isoformat(),
            'end': end.isoformat(),
            'count': len(rooms),
            'results': AvailableRoomSerializer(rooms, many=True).data,
        })
