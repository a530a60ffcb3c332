"""URL routing for the properties domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from apps.bookings.views import PropertyCalendarView

from .views import PropertyViewSet

router = DefaultRouter()
router.register(r"", PropertyViewSet, basename="property")

urlpatterns = [
    path("<int:property_id>/calendar/", PropertyCalendarView.as_view(), name="property-calendar"),
    path("", include(router.urls)),
]
