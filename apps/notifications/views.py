"""API views for the booking event feed."""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import generics  # type: ignore

from .filters import BookingEventFilter
from .models import BookingEvent
from .serializers import BookingEventSerializer


class BookingEventFeedView(generics.ListAPIView):
    """
    Read the feed in ascending sequence.

    Per-booking order is the order of the transitions; `after` lets a
    dispatcher resume from the last sequence it processed.
    """

    queryset = BookingEvent.objects.order_by("sequence")
    serializer_class = BookingEventSerializer
    filter_backends = [DjangoFilterBackend]
    filterset_class = BookingEventFilter
