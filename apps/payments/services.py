"""Payment order bookkeeping around the provider gateway."""

from __future__ import annotations

import logging
from typing import Optional
from uuid import UUID

from django.utils import timezone  # type: ignore

from shared.domain.exceptions import GatewayRejection, NotFoundError
from shared.domain.value_objects import Money
from shared.infrastructure.locking import lock_queryset_if_possible

from .gateway import CaptureResult, PaymentGateway
from .models import PaymentOrder

logger = logging.getLogger(__name__)


class PaymentService:
    """
    Creates and captures provider orders for bookings.

    Callers run these methods inside the booking's unit of work; the
    provider is only called after the order row is loaded, so a provider
    failure leaves every row untouched when the transaction rolls back.
    """

    def __init__(self, gateway: PaymentGateway):
        self.gateway = gateway

    def get_order(self, order_id: str, *, lock: bool = False) -> PaymentOrder:
        queryset = PaymentOrder.objects.filter(pk=order_id)
        if lock:
            queryset = lock_queryset_if_possible(queryset)
        order = queryset.first()
        if order is None:
            raise NotFoundError(f"Payment order {order_id} not found")
        return order

    def open_order(self, booking_id: UUID) -> Optional[PaymentOrder]:
        """The booking's order that is neither captured nor failed, if any."""
        return (
            PaymentOrder.objects.filter(booking_id=booking_id, status=PaymentOrder.Status.CREATED)
            .order_by("-created_at")
            .first()
        )

    def create_order(
        self,
        booking_id: UUID,
        amount: Money,
        *,
        platform_fee: Optional[Money] = None,
        description: str = "",
        payee_merchant_id: str = "",
    ) -> PaymentOrder:
        """
        Create a fresh provider order.

        The provider request id is derived from the booking and the attempt
        number, so repeating a create after a timeout returns the same
        provider order instead of opening a second one.
        """
        attempt = PaymentOrder.objects.filter(booking_id=booking_id).count() + 1
        order_id = self.gateway.create_order(
            str(booking_id),
            amount,
            description,
            payee_merchant_id=payee_merchant_id,
            platform_fee=platform_fee,
            request_id=f"booking-{booking_id}-attempt-{attempt}",
        )
        order = PaymentOrder.objects.create(
            order_id=order_id,
            booking_id=booking_id,
            amount=amount.amount_minor,
            currency=amount.currency,
            platform_fee=platform_fee.amount_minor if platform_fee else 0,
            provider=self.gateway.name,
        )
        logger.info(f"Payment order {order_id} (attempt {attempt}) created for booking {booking_id}: {amount}")
        return order

    def capture(self, order: PaymentOrder, *, timeout: Optional[float] = None) -> CaptureResult:
        """
        Capture an order exactly once.

        A captured order answers from storage without calling the provider.
        When the provider says the order was already captured (the core
        crashed after charging but before recording it), the existing
        transaction is adopted instead of failing.
        """
        if order.status == PaymentOrder.Status.CAPTURED:
            logger.info(f"Order {order.order_id} already captured, returning stored transaction")
            return CaptureResult(
                order_id=order.order_id,
                transaction_id=order.transaction_id,
                status="COMPLETED",
                payer_id=order.payer_id,
                payer_email=order.payer_email,
                already_captured=True,
            )
        if order.status == PaymentOrder.Status.FAILED:
            raise GatewayRejection(
                f"Order {order.order_id} failed earlier ({order.failure_reason}); create a new order"
            )

        result = self.gateway.capture_order(order.order_id, timeout=timeout)
        if result.already_captured:
            logger.warning(
                f"Reconciled order {order.order_id}: provider already captured it as {result.transaction_id}"
            )

        order.status = PaymentOrder.Status.CAPTURED
        order.transaction_id = result.transaction_id
        order.payer_id = result.payer_id
        order.payer_email = result.payer_email
        order.captured_at = timezone.now()
        order.save(update_fields=["status", "transaction_id", "payer_id", "payer_email", "captured_at"])
        return result

    def mark_failed(self, order: PaymentOrder, reason: str) -> None:
        order.status = PaymentOrder.Status.FAILED
        order.failure_reason = reason[:255]
        order.failed_at = timezone.now()
        order.save(update_fields=["status", "failure_reason", "failed_at"])
        logger.warning(f"Payment order {order.order_id} failed: {reason}")
