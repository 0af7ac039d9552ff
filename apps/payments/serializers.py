"""Serializers for payment endpoints."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore


class CreateOrderSerializer(serializers.Serializer):
    booking_id = serializers.UUIDField()
    amount_minor_units = serializers.IntegerField(min_value=1)
    actor_id = serializers.UUIDField()


class CaptureOrderSerializer(serializers.Serializer):
    timeout = serializers.FloatField(required=False, min_value=1, max_value=60)
