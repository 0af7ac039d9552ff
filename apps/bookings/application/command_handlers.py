"""
Booking Command Handlers

These are the use cases for the booking domain.
They orchestrate domain operations within transactions.

Commands:
- RequestBookingCommand: Renter asks for a date range
- DecideBookingCommand: Owner approves or rejects a request
- CreatePaymentOrderCommand: Renter opens (or reopens) a payment order
- CaptureOrderCommand: Capture a provider order and confirm the booking
- CancelBookingCommand: Renter or owner cancels
- CompleteBookingCommand: Close a booking whose end date has passed
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional
from uuid import UUID
import logging

from shared.application.message_bus import MessageBus
from shared.application.uow import DjangoUnitOfWork, EventStore
from shared.domain.exceptions import ConflictError, GatewayRejection, ValidationError
from shared.domain.value_objects import DateRange, Money
from apps.bookings.domain.entities import Booking, BookingStatus
from apps.listings.services import AvailabilityIndex
from apps.payments import fees
from apps.payments.models import PaymentOrder
from apps.payments.services import PaymentService

logger = logging.getLogger(__name__)

APPROVE = 'approve'
REJECT = 'reject'


# ===== Commands =====

@dataclass
class RequestBookingCommand:
    """
    Command to request a booking

    This is the primary entry point for renters.
    """
    listing_id: UUID
    renter_id: UUID
    start_date: date
    end_date: date
    message: str = ''


@dataclass
class DecideBookingCommand:
    """Owner decision on a requested booking"""
    booking_id: UUID
    decision: str  # approve | reject
    actor_id: UUID
    reason: str = ''


@dataclass
class CreatePaymentOrderCommand:
    """Renter asks for a provider order for the booking total"""
    booking_id: UUID
    amount_minor_units: int
    actor_id: UUID


@dataclass
class CaptureOrderCommand:
    """Capture a provider order; safe to repeat"""
    order_id: str
    timeout: Optional[float] = None


@dataclass
class CancelBookingCommand:
    """Command to cancel a booking"""
    booking_id: UUID
    actor_id: UUID  # renter or owner
    reason: str = ''


@dataclass
class CompleteBookingCommand:
    """Command to complete a booking after its end date"""
    booking_id: UUID
    today: Optional[date] = None


@dataclass(frozen=True)
class PaymentOrderResult:
    order_id: str
    booking_id: UUID
    amount: Money
    created: bool


@dataclass(frozen=True)
class CaptureOutcome:
    order_id: str
    booking_id: UUID
    transaction_id: str
    status: str
    already_captured: bool


# ===== Command Handlers =====

class _Handler:
    """Shared wiring: every handler writes through one unit of work"""

    def __init__(self, bus: MessageBus, event_store: Optional[EventStore] = None):
        self.bus = bus
        self.event_store = event_store

    def unit_of_work(self) -> DjangoUnitOfWork:
        return DjangoUnitOfWork(self.bus, self.event_store)


class RequestBookingHandler(_Handler):
    """
    Handler for RequestBooking command

    The range is checked against the availability index but nothing is
    reserved yet: dates are only held once the owner approves.
    """

    def __init__(self, bus, event_store, booking_repo, availability: AvailabilityIndex):
        super().__init__(bus, event_store)
        self.booking_repo = booking_repo
        self.availability = availability

    def __call__(self, command: RequestBookingCommand) -> Booking:
        dates = DateRange.from_keys(command.start_date, command.end_date)
        logger.info(
            f"Booking requested for listing {command.listing_id} "
            f"by renter {command.renter_id}, dates {dates}"
        )

        if dates.start < self.availability.today():
            raise ValidationError(f"Start date {dates.start.isoformat()} is in the past")

        with self.unit_of_work() as uow:
            listing = self.availability.get_listing(command.listing_id)
            if not listing.is_active:
                raise ValidationError(f"Listing {listing.id} is not accepting bookings")

            self.availability.ensure_range_free(listing.id, dates)

            breakdown = fees.price(dates.nights, listing.price_per_day, *fees.default_rates())
            booking = Booking.request(
                listing_id=listing.id,
                renter_id=command.renter_id,
                owner_id=listing.owner_id,
                dates=dates,
                price_per_day=breakdown.price_per_day,
                total_price=Money(breakdown.total, listing.currency),
                renter_fee=breakdown.renter_fee,
                lister_fee=breakdown.lister_fee,
                lister_payout=breakdown.lister_payout,
                message=command.message,
            )

            self.booking_repo.save(booking)
            uow.collect_events(booking)

        logger.info(f"Booking {booking.id} requested, total {booking.total_price}")
        return booking


class DecideBookingHandler(_Handler):
    """
    Handler for the owner's decision

    Approval reserves the range in the same transaction (first approved
    wins). If another booking took any of the days first, the reservation
    raises ConflictError and the booking stays REQUESTED.
    """

    def __init__(self, bus, event_store, booking_repo, availability: AvailabilityIndex):
        super().__init__(bus, event_store)
        self.booking_repo = booking_repo
        self.availability = availability

    def __call__(self, command: DecideBookingCommand) -> Booking:
        if command.decision not in (APPROVE, REJECT):
            raise ValidationError(f"Unknown decision {command.decision!r}; expected 'approve' or 'reject'")

        with self.unit_of_work() as uow:
            booking = self.booking_repo.get_by_id(command.booking_id, lock=True)

            if command.decision == APPROVE:
                booking.approve(command.actor_id)
                self.availability.reserve(
                    booking.listing_id,
                    booking.dates.start,
                    booking.dates.end,
                    booking_id=booking.id,
                )
            else:
                booking.reject(command.actor_id, command.reason)

            self.booking_repo.save(booking)
            uow.collect_events(booking)

        logger.info(f"Booking {booking.id} {booking.status.value} by owner {command.actor_id}")
        return booking


class CreatePaymentOrderHandler(_Handler):
    """
    Handler for opening a payment order

    APPROVED: create an order and move to PAYMENT_PENDING.
    PAYMENT_PENDING: reuse the open order, or create a fresh one after a
    declined capture. A gateway failure rolls everything back.
    """

    def __init__(self, bus, event_store, booking_repo, payments: PaymentService, availability: AvailabilityIndex):
        super().__init__(bus, event_store)
        self.booking_repo = booking_repo
        self.payments = payments
        self.availability = availability

    def __call__(self, command: CreatePaymentOrderCommand) -> PaymentOrderResult:
        with self.unit_of_work() as uow:
            booking = self.booking_repo.get_by_id(command.booking_id, lock=True)
            booking.check_payment_request(command.actor_id, command.amount_minor_units)

            if booking.status == BookingStatus.PAYMENT_PENDING:
                open_order = self.payments.open_order(booking.id)
                if open_order is not None:
                    logger.info(f"Reusing open order {open_order.order_id} for booking {booking.id}")
                    return PaymentOrderResult(
                        order_id=open_order.order_id,
                        booking_id=booking.id,
                        amount=booking.total_price,
                        created=False,
                    )

            listing = self.availability.get_listing(booking.listing_id)
            order = self.payments.create_order(
                booking.id,
                booking.total_price,
                platform_fee=Money(booking.renter_fee + booking.lister_fee, booking.total_price.currency),
                description=f"{listing.title} ({booking.dates})",
                payee_merchant_id=listing.payee_merchant_id,
            )

            booking.initiate_payment(command.actor_id, order.order_id)
            self.booking_repo.save(booking)
            uow.collect_events(booking)

        return PaymentOrderResult(
            order_id=order.order_id,
            booking_id=booking.id,
            amount=booking.total_price,
            created=True,
        )


class CaptureOrderHandler(_Handler):
    """
    Handler for capturing a provider order

    Idempotent per order. A repeated capture returns the stored transaction
    and never confirms twice. Transient gateway errors propagate and leave
    nothing mutated. A rejection is recorded (order failed, PaymentFailed
    emitted) and then re-raised to the caller once that record is committed.
    """

    def __init__(self, bus, event_store, booking_repo, payments: PaymentService):
        super().__init__(bus, event_store)
        self.booking_repo = booking_repo
        self.payments = payments

    def __call__(self, command: CaptureOrderCommand) -> CaptureOutcome:
        rejection: Optional[GatewayRejection] = None

        with self.unit_of_work() as uow:
            order = self.payments.get_order(command.order_id, lock=True)
            booking = self.booking_repo.get_by_id(order.booking_id, lock=True)

            if order.status == PaymentOrder.Status.CAPTURED:
                logger.info(f"Order {order.order_id} already captured for booking {booking.id}")
                return CaptureOutcome(
                    order_id=order.order_id,
                    booking_id=booking.id,
                    transaction_id=order.transaction_id,
                    status=booking.status.value,
                    already_captured=True,
                )

            if booking.status == BookingStatus.CONFIRMED:
                logger.info(f"Booking {booking.id} already confirmed, skipping capture of {order.order_id}")
                return CaptureOutcome(
                    order_id=order.order_id,
                    booking_id=booking.id,
                    transaction_id=booking.payment_transaction_id,
                    status=booking.status.value,
                    already_captured=True,
                )
            if booking.status == BookingStatus.CANCELLED:
                raise ConflictError(f"Booking {booking.id} was cancelled; order {order.order_id} cannot be captured")
            if order.status == PaymentOrder.Status.FAILED:
                raise GatewayRejection(
                    f"Order {order.order_id} failed earlier ({order.failure_reason}); create a new order"
                )

            try:
                result = self.payments.capture(order, timeout=command.timeout)
            except GatewayRejection as error:
                rejection = error
                self.payments.mark_failed(order, error.message)
                booking.record_payment_failure(order.order_id, error.message)
            else:
                booking.confirm_payment(order.order_id, result.transaction_id)

            self.booking_repo.save(booking)
            uow.collect_events(booking)

        if rejection is not None:
            logger.warning(f"Capture of order {command.order_id} rejected for booking {booking.id}")
            raise rejection

        logger.info(f"Booking {booking.id} confirmed with transaction {result.transaction_id}")
        return CaptureOutcome(
            order_id=order.order_id,
            booking_id=booking.id,
            transaction_id=result.transaction_id,
            status=booking.status.value,
            already_captured=result.already_captured,
        )


class CancelBookingHandler(_Handler):
    """Handler for cancelling a booking and releasing its dates"""

    def __init__(self, bus, event_store, booking_repo, availability: AvailabilityIndex):
        super().__init__(bus, event_store)
        self.booking_repo = booking_repo
        self.availability = availability

    def __call__(self, command: CancelBookingCommand) -> Booking:
        logger.info(f"Cancelling booking {command.booking_id}, reason: {command.reason}")

        with self.unit_of_work() as uow:
            booking = self.booking_repo.get_by_id(command.booking_id, lock=True)
            booking.cancel(command.actor_id, command.reason)

            self.availability.release(
                booking.listing_id,
                booking.dates.start,
                booking.dates.end,
                booking_id=booking.id,
            )

            self.booking_repo.save(booking)
            uow.collect_events(booking)

        logger.info(f"Booking {booking.id} cancelled by {command.actor_id}")
        return booking


class CompleteBookingHandler(_Handler):
    """Handler for completing a booking once its last day has passed"""

    def __init__(self, bus, event_store, booking_repo, availability: AvailabilityIndex):
        super().__init__(bus, event_store)
        self.booking_repo = booking_repo
        self.availability = availability

    def __call__(self, command: CompleteBookingCommand) -> Booking:
        today = command.today or self.availability.today()

        with self.unit_of_work() as uow:
            booking = self.booking_repo.get_by_id(command.booking_id, lock=True)
            booking.complete(today)

            # Only reserving statuses may hold rows in the index
            self.availability.release(
                booking.listing_id,
                booking.dates.start,
                booking.dates.end,
                booking_id=booking.id,
            )

            self.booking_repo.save(booking)
            uow.collect_events(booking)

        logger.info(f"Booking {booking.id} completed")
        return booking
