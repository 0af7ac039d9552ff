"""Serializers for the booking event feed."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import BookingEvent


class BookingEventSerializer(serializers.ModelSerializer):
    class Meta:
        model = BookingEvent
        fields = [
            "sequence",
            "event_id",
            "event_type",
            "booking_id",
            "listing_id",
            "renter_id",
            "owner_id",
            "occurred_at",
            "payload",
        ]
        read_only_fields = fields
