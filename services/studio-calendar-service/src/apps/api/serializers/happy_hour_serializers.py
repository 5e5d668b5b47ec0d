# services/studio-calendar-service/src/apps/api/serializers/happy_hour_serializers.py
"""
Happy Hour Serializers
"""

from rest_framework import serializers

from apps.core.models import HappyHourRule
from apps.core.services.opening_hours import minutes_from_time, minutes_to_time


class HappyHourDaySerializer(serializers.Serializer):
    """One weekday of the owner's happy-hour editor."""

    weekday = serializers.IntegerField(min_value=0, max_value=6)
    enabled = serializers.BooleanField()
    end_time = serializers.CharField(required=False, allow_blank=True, max_length=5)

    def validate(self, attrs):
        if attrs['enabled'] and minutes_from_time(attrs.get('end_time')) is None:
            raise serializers.ValidationError({
                'end_time': 'Use HH:MM for enabled days'
            })
        return attrs


class HappyHourScheduleSerializer(serializers.Serializer):
    days = HappyHourDaySerializer(many=True)

    def validate_days(self, value):
        if len(value) != 7:
            raise serializers.ValidationError('Schedule must contain exactly 7 days')
        if len({day['weekday'] for day in value}) != 7:
            raise serializers.ValidationError('Each weekday must appear once')
        return value


class HappyHourToggleSerializer(serializers.Serializer):
    """Turn the weekly window containing one instance on or off."""

    start_at = serializers.DateTimeField()
    end_at = serializers.DateTimeField()
    active = serializers.BooleanField()

    def validate(self, attrs):
        if attrs['end_at'] <= attrs['start_at']:
            raise serializers.ValidationError({
                'end_at': 'End time must be after start time'
            })
        return attrs


class HappyHourRuleSerializer(serializers.ModelSerializer):
    room_id = serializers.UUIDField(read_only=True)
    weekday_display = serializers.CharField(source='get_weekday_display', read_only=True)
    start_time = serializers.SerializerMethodField()
    end_time = serializers.SerializerMethodField()

    class Meta:
        model = HappyHourRule
        fields = [
            'id', 'room_id', 'weekday', 'weekday_display',
            'start_minutes', 'end_minutes', 'start_time', 'end_time',
        ]
        read_only_fields = fields

    def get_start_time(self, obj) -> str:
        return minutes_to_time(obj.start_minutes)

    def get_end_time(self, obj) -> str:
        return minutes_to_time(obj.end_minutes)
