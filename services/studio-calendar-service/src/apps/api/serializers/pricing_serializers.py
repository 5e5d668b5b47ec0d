# services/studio-calendar-service/src/apps/api/serializers/pricing_serializers.py
"""
Pricing and Availability Serializers
"""

from rest_framework import serializers

from apps.core.models import Room


class PriceEstimateSerializer(serializers.Serializer):
    room_id = serializers.UUIDField()
    start_at = serializers.DateTimeField()
    hours = serializers.IntegerField(min_value=1, max_value=24)


class PriceEstimateResultSerializer(serializers.Serializer):
    room_id = serializers.UUIDField()
    start_at = serializers.DateTimeField()
    end_at = serializers.DateTimeField()
    hours = serializers.IntegerField()
    happy_hours = serializers.IntegerField()
    base_rate = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True)
    happy_hour_rate = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True)
    total_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    currency = serializers.CharField()


class AvailabilityQuerySerializer(serializers.Serializer):
    start = serializers.DateTimeField()
    hours = serializers.IntegerField(min_value=1, max_value=24)
    city = serializers.CharField(required=False, allow_blank=True)
    district = serializers.CharField(required=False, allow_blank=True)


class AvailableRoomSerializer(serializers.ModelSerializer):
    studio_id = serializers.UUIDField(read_only=True)
    studio_name = serializers.CharField(source='studio.name', read_only=True)
    city = serializers.CharField(source='studio.city', read_only=True)
    district = serializers.CharField(source='studio.district', read_only=True)

    class Meta:
        model = Room
        fields = [
            'id', 'name', 'studio_id', 'studio_name', 'city', 'district',
            'hourly_rate', 'min_rate', 'flat_rate', 'happy_hour_rate', 'daily_rate',
        ]
        read_only_fields = fields
