# services/studio-calendar-service/src/apps/api/serializers/reservation_serializers.py
"""
Reservation Serializers
"""

from rest_framework import serializers

from apps.core.models import ReservationRequest


class ReservationRequestSerializer(serializers.ModelSerializer):
    """Reservation request as shown to the owner and the requester."""

    studio_id = serializers.UUIDField(read_only=True)
    room_id = serializers.UUIDField(read_only=True)
    room_name = serializers.CharField(source='room.name', read_only=True)
    status_display = serializers.CharField(
        source='get_status_display',
        read_only=True
    )
    calendar_block_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = ReservationRequest
        fields = [
            'id', 'studio_id', 'room_id', 'room_name',
            'requester_id', 'requester_name', 'requester_phone', 'requester_email',
            'note', 'start_at', 'end_at', 'hours',
            'total_price', 'currency',
            'status', 'status_display', 'calendar_block_id',
            'decided_by', 'decided_at',
            'studio_unread', 'user_unread',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class ReservationCreateSerializer(serializers.Serializer):
    """Input for a new reservation request."""

    studio_id = serializers.UUIDField()
    room_id = serializers.UUIDField()
    start_at = serializers.DateTimeField()
    hours = serializers.IntegerField(min_value=1, max_value=24)

    # Optional when the token carries the profile
    requester_name = serializers.CharField(
        max_length=120,
        required=False,
        allow_blank=True
    )
    requester_phone = serializers.CharField(
        max_length=40,
        required=False,
        allow_blank=True
    )
    requester_email = serializers.EmailField(
        required=False,
        allow_blank=True,
        allow_null=True
    )
    note = serializers.CharField(
        max_length=500,
        required=False,
        allow_blank=True,
        allow_null=True
    )


class ReservationDecisionSerializer(serializers.Serializer):
    """Outcome of an owner decision."""

    id = serializers.UUIDField()
    status = serializers.CharField()
    calendar_block_id = serializers.UUIDField(allow_null=True)
