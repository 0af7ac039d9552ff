"""API views for the booking domain."""

from __future__ import annotations

from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from shared.domain.exceptions import NotFoundError
from shared.infrastructure.api import DomainErrorMixin

from .application.bootstrap import bootstrap
from .application.command_handlers import (
    CancelBookingCommand,
    DecideBookingCommand,
    RequestBookingCommand,
)
from .models import Booking
from .serializers import (
    BookingCancelSerializer,
    BookingDecisionSerializer,
    BookingRequestSerializer,
    BookingSerializer,
)


class BookingCommandView(DomainErrorMixin, APIView):
    """Base view: each request dispatches one command on a fresh bus."""

    def get_bus(self):  # type: ignore
        return bootstrap()

    def render_booking(self, booking_id, http_status=status.HTTP_200_OK) -> Response:
        row = Booking.objects.filter(pk=booking_id).first()
        if row is None:
            raise NotFoundError(f"Booking {booking_id} not found")
        return Response(BookingSerializer(row).data, status=http_status)


class BookingCreateView(BookingCommandView):
    """Renter requests a date range."""

    def post(self, request):  # type: ignore
        serializer = BookingRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = self.get_bus().handle_command(RequestBookingCommand(**serializer.validated_data))
        return self.render_booking(booking.id, status.HTTP_201_CREATED)


class BookingDetailView(BookingCommandView):
    def get(self, request, booking_id):  # type: ignore
        return self.render_booking(booking_id)


class BookingDecisionView(BookingCommandView):
    """Owner approves or rejects a request."""

    def post(self, request, booking_id):  # type: ignore
        serializer = BookingDecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.get_bus().handle_command(DecideBookingCommand(booking_id=booking_id, **serializer.validated_data))
        return self.render_booking(booking_id)


class BookingCancelView(BookingCommandView):
    """Renter or owner cancels an approved, pending or confirmed booking."""

    def post(self, request, booking_id):  # type: ignore
        serializer = BookingCancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.get_bus().handle_command(CancelBookingCommand(booking_id=booking_id, **serializer.validated_data))
        return self.render_booking(booking_id)
