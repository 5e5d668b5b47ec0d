# services/studio-calendar-service/src/apps/api/views/reservation_views.py
"""
Reservation API Views

Customer booking requests and owner decisions.
"""

import uuid
import logging

from rest_framework import viewsets, status, filters
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from django_filters.rest_framework import DjangoFilterBackend

from apps.core.models import ReservationRequest
from apps.core.services import CalendarServiceError, ReservationService
from apps.core.services.ownership import get_owned_studio
from apps.api.serializers import (
    ReservationRequestSerializer,
    ReservationCreateSerializer,
    ReservationDecisionSerializer,
)
from shared.common.exceptions import BadRequestException
from .errors import service_error_response
from .filters import ReservationRequestFilter

logger = logging.getLogger(__name__)


class ReservationRequestViewSet(viewsets.GenericViewSet):
    """
    ViewSet for reservation requests.

    Anyone may submit a request. Owners list and decide the requests of
    their studios; signed-in customers list their own.
    """

    queryset = ReservationRequest.objects.none()
    serializer_class = ReservationRequestSerializer
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = ReservationRequestFilter
    ordering_fields = ['start_at', 'created_at', 'status']
    ordering = ['-created_at']
    throttle_scope = 'reservation_create'
    lookup_value_regex = '[0-9a-f-]{36}'

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.reservation_service = ReservationService()

    def get_permissions(self):
        if self.action == 'create':
            return [AllowAny()]
        return [IsAuthenticated()]

    def get_throttles(self):
        if self.action == 'create':
            return [ScopedRateThrottle()]
        return []

    def list(self, request):
        """List requests of an owned studio (studio_id) or the caller's own."""
        studio_id = request.query_params.get('studio_id')

        try:
            if studio_id:
                try:
                    studio_id = uuid.UUID(studio_id)
                except ValueError:
                    raise BadRequestException('studio_id must be a UUID')
                get_owned_studio(studio_id, request.user)
                queryset = self.reservation_service.list_for_studio(studio_id)
            else:
                queryset = self.reservation_service.list_for_requester(request.user)
        except CalendarServiceError as e:
            return service_error_response(e)

        queryset = self.filter_queryset(queryset)
        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = self.get_serializer(page, many=True)
            return self.get_paginated_response(serializer.data)

        serializer = self.get_serializer(queryset, many=True)
        return Response(serializer.data)

    def retrieve(self, request, pk=None):
        try:
            reservation = self.reservation_service.get_visible_request(pk, request.user)
        except CalendarServiceError as e:
            return service_error_response(e)

        return Response(ReservationRequestSerializer(reservation).data)

    def create(self, request):
        """Submit a reservation request."""
        serializer = ReservationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data

        try:
            reservation = self.reservation_service.create(
                studio_id=data['studio_id'],
                room_id=data['room_id'],
                start_at=data['start_at'],
                hours=data['hours'],
                requester_name=data.get('requester_name'),
                requester_phone=data.get('requester_phone'),
                requester_email=data.get('requester_email'),
                note=data.get('note'),
                requester=request.user,
            )
        except CalendarServiceError as e:
            return service_error_response(e)

        return Response(
            ReservationRequestSerializer(reservation).data,
            status=status.HTTP_201_CREATED
        )

    def _decision_response(self, reservation) -> Response:
        serializer = ReservationDecisionSerializer({
            'id': reservation.id,
            'status': reservation.status,
            'calendar_block_id': reservation.calendar_block_id,
        })
        return Response(serializer.data)

    @action(detail=True, methods=['post'])
    def approve(self, request, pk=None):
        """Approve a request and block its slot."""
        try:
            reservation = self.reservation_service.approve(pk, request.user)
        except CalendarServiceError as e:
            return service_error_response(e)

        return self._decision_response(reservation)

    @action(detail=True, methods=['post'])
    def reject(self, request, pk=None):
        """Reject a request."""
        try:
            reservation = self.reservation_service.reject(pk, request.user)
        except CalendarServiceError as e:
            return service_error_response(e)

        return self._decision_response(reservation)

    @action(detail=True, methods=['post'])
    def read(self, request, pk=None):
        """Mark a request as read by the owner."""
        try:
            reservation = self.reservation_service.mark_read(pk, request.user)
        except CalendarServiceError as e:
            return service_error_response(e)

        return Response(ReservationRequestSerializer(reservation).data)
