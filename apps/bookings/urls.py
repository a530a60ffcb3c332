"""URL routing for the reservation engine."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import AvailabilityView, QuoteView, ReservationViewSet

router = DefaultRouter()
router.register(r"reservations", ReservationViewSet, basename="reservation")

urlpatterns = [
    path("availability/", AvailabilityView.as_view(), name="availability"),
    path("pricing/quote/", QuoteView.as_view(), name="pricing-quote"),
    path("", include(router.urls)),
]
