# services/studio-calendar-service/src/config/urls.py
"""
URL configuration for Studio Calendar Service
"""

from django.contrib import admin
from django.urls import path, include

from shared.common.health import get_health_urlpatterns

urlpatterns = [
    # Admin
    path('admin/', admin.site.urls),

    # API v1
    path('api/v1/', include('apps.api.urls')),
]

# Health checks
urlpatterns += get_health_urlpatterns()
