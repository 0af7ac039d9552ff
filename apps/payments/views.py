"""API views for payment orders."""

from __future__ import annotations

from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.bookings.application.bootstrap import bootstrap
from apps.bookings.application.command_handlers import CaptureOrderCommand, CreatePaymentOrderCommand
from shared.infrastructure.api import DomainErrorMixin

from .serializers import CaptureOrderSerializer, CreateOrderSerializer


class CreateOrderView(DomainErrorMixin, APIView):
    """Renter opens a provider order for the booking total."""

    def post(self, request):  # type: ignore
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = bootstrap().handle_command(CreatePaymentOrderCommand(**serializer.validated_data))
        return Response(
            {
                "order_id": result.order_id,
                "booking_id": str(result.booking_id),
                "amount_minor_units": result.amount.amount_minor,
                "currency": result.amount.currency,
            },
            status=status.HTTP_201_CREATED if result.created else status.HTTP_200_OK,
        )


class CaptureOrderView(DomainErrorMixin, APIView):
    """
    Capture an order and confirm its booking.

    Safe to call repeatedly, from the client after approval or from a
    provider webhook.
    """

    def post(self, request, order_id):  # type: ignore
        serializer = CaptureOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        outcome = bootstrap().handle_command(
            CaptureOrderCommand(order_id=order_id, timeout=serializer.validated_data.get("timeout"))
        )
        return Response(
            {
                "order_id": outcome.order_id,
                "booking_id": str(outcome.booking_id),
                "transaction_id": outcome.transaction_id,
                "status": outcome.status,
                "already_captured": outcome.already_captured,
            }
        )
