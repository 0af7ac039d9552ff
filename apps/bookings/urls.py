"""URL routing for the booking domain."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import BookingCancelView, BookingCreateView, BookingDecisionView, BookingDetailView

urlpatterns = [
    path("", BookingCreateView.as_view(), name="booking-create"),
    path("<uuid:booking_id>/", BookingDetailView.as_view(), name="booking-detail"),
    path("<uuid:booking_id>/decision/", BookingDecisionView.as_view(), name="booking-decision"),
    path("<uuid:booking_id>/cancel/", BookingCancelView.as_view(), name="booking-cancel"),
]
