# services/studio-calendar-service/src/apps/api/views/happy_hour_views.py
"""
Happy Hour API Views

Weekly happy-hour schedule of a room.
"""

import logging

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.models import HappyHourRule
from apps.core.services import CalendarServiceError, HappyHourService
from apps.core.services.ownership import actor_uuid, get_room, require_owner
from apps.api.serializers import (
    HappyHourRuleSerializer,
    HappyHourScheduleSerializer,
    HappyHourToggleSerializer,
)
from .errors import service_error_response

logger = logging.getLogger(__name__)


class HappyHourBaseView(APIView):
    permission_classes = [IsAuthenticated]

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.happy_hour_service = HappyHourService()

    def get_owned_room(self, request, room_id):
        room = get_room(room_id)
        require_owner(room.studio, request.user)
        return room


class HappyHourScheduleView(HappyHourBaseView):
    """Per-weekday happy-hour schedule (GET) and its replacement (PUT)."""

    def get(self, request, room_id):
        try:
            room = self.get_owned_room(request, room_id)
        except CalendarServiceError as e:
            return service_error_response(e)

        return Response({
            'room_id': str(room.id),
            'days': self.happy_hour_service.schedule_days(room),
            'rules': HappyHourRuleSerializer(
                HappyHourRule.objects.filter(room=room), many=True
            ).data,
        })

    def put(self, request, room_id):
        serializer = HappyHourScheduleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            room = self.get_owned_room(request, room_id)
            rules = self.happy_hour_service.replace_schedule(
                room,
                serializer.validated_data['days'],
                created_by=actor_uuid(request.user),
            )
        except CalendarServiceError as e:
            return service_error_response(e)

        return Response({
            'room_id': str(room.id),
            'days': self.happy_hour_service.schedule_days(room),
            'rules': HappyHourRuleSerializer(rules, many=True).data,
        })


class HappyHourToggleView(HappyHourBaseView):
    """Switch the weekly window of a single happy-hour instance on or off."""

    def post(self, request, room_id):
        serializer = HappyHourToggleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data

        try:
            room = self.get_owned_room(request, room_id)
            rule = self.happy_hour_service.set_slot(
                room,
                data['start_at'],
                data['end_at'],
                active=data['active'],
                created_by=actor_uuid(request.user),
            )
        except CalendarServiceError as e:
            return service_error_response(e)

        if rule is None:
            return Response({'active': False}, status=status.HTTP_200_OK)

        return Response({
            'active': True,
            'rule': HappyHourRuleSerializer(rule).data,
        })


class HappyHourImportView(HappyHourBaseView):
    """Fold a room's stored concrete happy-hour slots into weekly rules."""

    def post(self, request, room_id):
        try:
            room = self.get_owned_room(request, room_id)
            rules = self.happy_hour_service.import_legacy_slots(room)
        except CalendarServiceError as e:
            return service_error_response(e)

        return Response({
            'room_id': str(room.id),
            'imported': len(rules),
            'rules': HappyHourRuleSerializer(rules, many=True).data,
        })
