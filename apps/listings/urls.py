"""URL routing for listing availability."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import AvailabilityCheckView, UnavailableDatesView

urlpatterns = [
    path(
        "<uuid:listing_id>/unavailable-dates/",
        UnavailableDatesView.as_view(),
        name="listing-unavailable-dates",
    ),
    path(
        "<uuid:listing_id>/availability/",
        AvailabilityCheckView.as_view(),
        name="listing-availability",
    ),
]
