"""Boundary DTOs for the availability calendar."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .services import ADD, REMOVE


class UnavailableDatesMutationSerializer(serializers.Serializer):
    dates = serializers.ListField(child=serializers.DateField(), allow_empty=False)
    op = serializers.ChoiceField(choices=[ADD, REMOVE])
    actor_id = serializers.UUIDField()


class AvailabilityQuerySerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()

    def validate(self, attrs):  # type: ignore
        if attrs["end_date"] < attrs["start_date"]:
            raise serializers.ValidationError("end_date must not be before start_date.")
        return attrs
