"""Filters for the booking event feed."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import BookingEvent


class BookingEventFilter(django_filters.FilterSet):
    booking_id = django_filters.UUIDFilter()
    listing_id = django_filters.UUIDFilter()
    event_type = django_filters.CharFilter()
    after = django_filters.NumberFilter(field_name="sequence", lookup_expr="gt")

    class Meta:
        model = BookingEvent
        fields = ["booking_id", "listing_id", "event_type", "after"]
