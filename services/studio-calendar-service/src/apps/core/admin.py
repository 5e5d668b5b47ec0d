from django.contrib import admin
from .models import (
    Studio,
    Room,
    CalendarSettings,
    CalendarBlock,
    HappyHourRule,
    HappyHourSlot,
    ReservationRequest,
)


class RoomInline(admin.TabularInline):
    model = Room
    extra = 0
    fields = ['name', 'hourly_rate', 'happy_hour_rate', 'is_active']


@admin.register(Studio)
class StudioAdmin(admin.ModelAdmin):
    list_display = ['name', 'owner_email', 'city', 'district', 'is_active']
    list_filter = ['is_active', 'city']
    search_fields = ['name', 'owner_email']
    inlines = [RoomInline]


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ['name', 'studio', 'hourly_rate', 'min_rate', 'flat_rate', 'happy_hour_rate', 'is_active']
    list_filter = ['is_active']
    search_fields = ['name', 'studio__name']


@admin.register(CalendarSettings)
class CalendarSettingsAdmin(admin.ModelAdmin):
    list_display = ['studio', 'timezone', 'day_cutoff_hour', 'booking_approval_mode', 'happy_hour_enabled']
    list_filter = ['booking_approval_mode', 'happy_hour_enabled']


@admin.register(CalendarBlock)
class CalendarBlockAdmin(admin.ModelAdmin):
    list_display = ['id', 'room', 'type', 'status', 'start_at', 'end_at']
    list_filter = ['type', 'status']
    date_hierarchy = 'start_at'


@admin.register(HappyHourRule)
class HappyHourRuleAdmin(admin.ModelAdmin):
    list_display = ['room', 'weekday', 'start_minutes', 'end_minutes']
    list_filter = ['weekday']


@admin.register(HappyHourSlot)
class HappyHourSlotAdmin(admin.ModelAdmin):
    list_display = ['room', 'start_at', 'end_at']


@admin.register(ReservationRequest)
class ReservationRequestAdmin(admin.ModelAdmin):
    list_display = ['id', 'requester_name', 'room', 'start_at', 'hours', 'status', 'total_price']
    list_filter = ['status', 'studio_unread']
    search_fields = ['requester_name', 'requester_email', 'requester_phone']
    readonly_fields = ['calendar_block', 'decided_by', 'decided_at']
