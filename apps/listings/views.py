"""API views for the availability calendar."""

from __future__ import annotations

from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from shared.domain.value_objects import DateRange, to_date_key
from shared.infrastructure.api import DomainErrorMixin

from .serializers import AvailabilityQuerySerializer, UnavailableDatesMutationSerializer
from .services import AvailabilityIndex


class UnavailableDatesView(DomainErrorMixin, APIView):
    """List or edit the unavailable days of one listing."""

    def get(self, request, listing_id):  # type: ignore
        days = AvailabilityIndex().list_unavailable(listing_id)
        return Response([to_date_key(day) for day in days])

    def post(self, request, listing_id):  # type: ignore
        serializer = UnavailableDatesMutationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        index = AvailabilityIndex()
        changed = index.mutate(
            listing_id,
            serializer.validated_data["dates"],
            serializer.validated_data["op"],
            serializer.validated_data["actor_id"],
        )
        return Response(
            {
                "changed": [to_date_key(day) for day in changed],
                "unavailable_dates": [to_date_key(day) for day in index.list_unavailable(listing_id)],
            },
            status=status.HTTP_200_OK,
        )


class AvailabilityCheckView(DomainErrorMixin, APIView):
    """Answer whether a date range can still be requested."""

    def get(self, request, listing_id):  # type: ignore
        serializer = AvailabilityQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        dates = DateRange(serializer.validated_data["start_date"], serializer.validated_data["end_date"])
        index = AvailabilityIndex()
        available = index.is_range_free(listing_id, dates.start, dates.end)
        return Response(
            {
                "available": available,
                "in_past": dates.start < index.today(),
                "conflicting_dates": [to_date_key(day) for day in index.conflicting_days(listing_id, dates)],
            }
        )
