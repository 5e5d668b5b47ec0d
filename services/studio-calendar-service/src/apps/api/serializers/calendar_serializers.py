# services/studio-calendar-service/src/apps/api/serializers/calendar_serializers.py
"""
Calendar Serializers

Blocks, settings, the calendar view and the occupancy summary.
"""

from rest_framework import serializers

from apps.core.models import CalendarBlock, CalendarSettings
from apps.core.services.opening_hours import effective_opening_hours, to_json


class CalendarBlockSerializer(serializers.ModelSerializer):
    """Calendar block with its linked reservation, if any."""

    studio_id = serializers.UUIDField(read_only=True)
    room_id = serializers.UUIDField(read_only=True)
    type_display = serializers.CharField(source='get_type_display', read_only=True)
    duration_minutes = serializers.IntegerField(read_only=True)
    is_blocking = serializers.BooleanField(read_only=True)
    reservation_request_id = serializers.SerializerMethodField()

    class Meta:
        model = CalendarBlock
        fields = [
            'id', 'studio_id', 'room_id',
            'start_at', 'end_at', 'duration_minutes',
            'type', 'type_display', 'status', 'is_blocking',
            'title', 'note',
            'reservation_request_id',
            'created_by', 'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_reservation_request_id(self, obj):
        request = getattr(obj, 'reservation_request', None)
        return str(request.id) if request else None


class CalendarBlockCreateSerializer(serializers.Serializer):
    """Input for a new block."""

    studio_id = serializers.UUIDField()
    room_id = serializers.UUIDField()
    start_at = serializers.DateTimeField()
    end_at = serializers.DateTimeField()
    type = serializers.ChoiceField(
        choices=CalendarBlock.BlockType.choices,
        default=CalendarBlock.BlockType.MANUAL_BLOCK
    )
    title = serializers.CharField(max_length=200, required=False, allow_blank=True)
    note = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        if attrs['end_at'] <= attrs['start_at']:
            raise serializers.ValidationError({
                'end_at': 'End time must be after start time'
            })
        return attrs


class CalendarBlockUpdateSerializer(serializers.Serializer):
    """Input for moving or relabelling a block."""

    room_id = serializers.UUIDField(required=False)
    start_at = serializers.DateTimeField(required=False)
    end_at = serializers.DateTimeField(required=False)
    type = serializers.ChoiceField(
        choices=CalendarBlock.BlockType.choices,
        required=False
    )
    status = serializers.ChoiceField(
        choices=CalendarBlock.Status.choices,
        required=False,
        allow_null=True
    )
    title = serializers.CharField(max_length=200, required=False, allow_blank=True)
    note = serializers.CharField(required=False, allow_blank=True)


class CalendarSettingsSerializer(serializers.ModelSerializer):
    """Stored settings plus the opening hours that actually apply."""

    studio_id = serializers.UUIDField(read_only=True)
    effective_weekly_hours = serializers.SerializerMethodField()

    class Meta:
        model = CalendarSettings
        fields = [
            'studio_id',
            'day_cutoff_hour', 'timezone',
            'weekly_hours', 'effective_weekly_hours', 'slot_step_minutes',
            'happy_hour_enabled',
            'booking_approval_mode', 'booking_cutoff_value', 'booking_cutoff_unit',
        ]
        read_only_fields = fields

    def get_effective_weekly_hours(self, obj):
        return to_json(effective_opening_hours(obj.studio, obj))


class CalendarSettingsUpdateSerializer(serializers.Serializer):
    """Partial settings update; the service validates values."""

    day_cutoff_hour = serializers.IntegerField(required=False, min_value=0, max_value=23)
    timezone = serializers.CharField(required=False, max_length=64)
    weekly_hours = serializers.JSONField(required=False, allow_null=True)
    slot_step_minutes = serializers.IntegerField(required=False)
    happy_hour_enabled = serializers.BooleanField(required=False)
    booking_approval_mode = serializers.ChoiceField(
        choices=CalendarSettings.ApprovalMode.choices,
        required=False
    )
    booking_cutoff_value = serializers.IntegerField(required=False, min_value=0)
    booking_cutoff_unit = serializers.ChoiceField(
        choices=CalendarSettings.CutoffUnit.choices,
        required=False
    )


class CalendarQuerySerializer(serializers.Serializer):
    """Query parameters of the studio calendar view."""

    start = serializers.DateTimeField()
    end = serializers.DateTimeField()
    room_ids = serializers.CharField(required=False, allow_blank=True)
    include_blocks = serializers.BooleanField(required=False, default=True)
    include_happy_hours = serializers.BooleanField(required=False, default=True)
    include_summary = serializers.BooleanField(required=False, default=False)

    def validate_room_ids(self, value):
        return [part.strip() for part in value.split(',') if part.strip()]


class HappyHourInstanceSerializer(serializers.Serializer):
    room_id = serializers.UUIDField()
    start_at = serializers.DateTimeField()
    end_at = serializers.DateTimeField()


class OccupancySummarySerializer(serializers.Serializer):
    studio_id = serializers.UUIDField()
    week_start = serializers.DateTimeField()
    week_end = serializers.DateTimeField()
    month_start = serializers.DateTimeField()
    month_end = serializers.DateTimeField()
    week_occupancy = serializers.FloatField()
    month_occupancy = serializers.FloatField()
    month_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    unpriced_blocks = serializers.IntegerField()
    currency = serializers.CharField()


class CalendarViewSerializer(serializers.Serializer):
    blocks = CalendarBlockSerializer(many=True)
    expanded_happy_hours = HappyHourInstanceSerializer(many=True)
    summary = OccupancySummarySerializer(required=False)
