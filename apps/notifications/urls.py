"""URL routing for the booking event feed."""

from django.urls import path  # type: ignore

from .views import BookingEventFeedView

urlpatterns = [
    path("events/", BookingEventFeedView.as_view(), name="booking-event-feed"),
]
