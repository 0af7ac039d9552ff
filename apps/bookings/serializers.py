"""Serializers for the booking domain.

Request serializers are DTOs validated at the boundary; they never touch
the ORM. `BookingSerializer` renders a stored booking row.
"""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .application.command_handlers import APPROVE, REJECT
from .models import Booking


class BookingRequestSerializer(serializers.Serializer):
    listing_id = serializers.UUIDField()
    renter_id = serializers.UUIDField()
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    message = serializers.CharField(required=False, allow_blank=True, default="", max_length=2000)

    def validate(self, attrs):  # type: ignore
        if attrs["end_date"] < attrs["start_date"]:
            raise serializers.ValidationError({"end_date": "End date cannot be before start date."})
        return attrs


class BookingDecisionSerializer(serializers.Serializer):
    decision = serializers.ChoiceField(choices=[APPROVE, REJECT])
    actor_id = serializers.UUIDField()
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)


class BookingCancelSerializer(serializers.Serializer):
    actor_id = serializers.UUIDField()
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)


class BookingSerializer(serializers.ModelSerializer):
    """Detailed booking representation; money fields are minor units."""

    listing_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = Booking
        fields = [
            "id",
            "listing_id",
            "renter_id",
            "owner_id",
            "start_date",
            "end_date",
            "nights",
            "status",
            "message",
            "price_per_day",
            "renter_fee",
            "lister_fee",
            "lister_payout",
            "total_price",
            "currency",
            "payment_order_id",
            "payment_transaction_id",
            "rejection_reason",
            "cancellation_reason",
            "cancelled_by",
            "created_at",
            "decided_at",
            "confirmed_at",
            "cancelled_at",
            "completed_at",
        ]
        read_only_fields = fields
