# services/studio-calendar-service/src/apps/api/urls.py
"""
Studio Calendar API URL Configuration
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    # Reservations
    ReservationRequestViewSet,
    # Calendar
    CalendarBlockViewSet,
    StudioCalendarView,
    OccupancySummaryView,
    CalendarSettingsView,
    # Happy hours
    HappyHourScheduleView,
    HappyHourToggleView,
    HappyHourImportView,
    # Pricing and availability
    PriceEstimateView,
    AvailabilitySearchView,
)

app_name = 'api'

router = DefaultRouter()
router.register(r'reservation-requests', ReservationRequestViewSet, basename='reservation-request')
router.register(r'calendar-blocks', CalendarBlockViewSet, basename='calendar-block')

urlpatterns = [
    path('', include(router.urls)),

    # Studio calendar
    path('studios/<uuid:studio_id>/calendar/', StudioCalendarView.as_view(), name='studio-calendar'),
    path('studios/<uuid:studio_id>/summary/', OccupancySummaryView.as_view(), name='studio-summary'),
    path(
        'studios/<uuid:studio_id>/calendar-settings/',
        CalendarSettingsView.as_view(),
        name='calendar-settings'
    ),

    # Happy hours
    path(
        'rooms/<uuid:room_id>/happy-hours/schedule/',
        HappyHourScheduleView.as_view(),
        name='happy-hour-schedule'
    ),
    path(
        'rooms/<uuid:room_id>/happy-hours/toggle/',
        HappyHourToggleView.as_view(),
        name='happy-hour-toggle'
    ),
    path(
        'rooms/<uuid:room_id>/happy-hours/import/',
        HappyHourImportView.as_view(),
        name='happy-hour-import'
    ),

    # Public
    path('price-estimate/', PriceEstimateView.as_view(), name='price-estimate'),
    path('availability/', AvailabilitySearchView.as_view(), name='availability'),
]
