"""
Booking Domain Entities

- Booking: aggregate root driving a reservation through its lifecycle
- BookingStatus: FSM states
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from shared.domain.base import Aggregate, utcnow
from shared.domain.exceptions import AuthorizationError, ValidationError
from shared.domain.value_objects import DateRange, Money
from apps.bookings.domain import events


class InvalidTransitionError(ValidationError):
    """The booking's current status does not allow the requested transition"""

    code = 'invalid_transition'


class BookingStatus(Enum):
    """
    Booking Status Finite State Machine

    State transitions:
    - REQUESTED -> APPROVED (owner approves, dates reserved)
    - REQUESTED -> REJECTED (owner rejects)
    - APPROVED -> PAYMENT_PENDING (renter opens a payment order)
    - PAYMENT_PENDING -> PAYMENT_PENDING (capture declined, retry with new order)
    - PAYMENT_PENDING -> CONFIRMED (capture succeeded)
    - CONFIRMED -> COMPLETED (end date passed)
    - APPROVED / PAYMENT_PENDING / CONFIRMED -> CANCELLED (renter or owner)
    """
    REQUESTED = 'requested'
    APPROVED = 'approved'
    REJECTED = 'rejected'
    PAYMENT_PENDING = 'payment_pending'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'
    COMPLETED = 'completed'


# Statuses whose date range is held in the availability index
RESERVING_STATUSES = frozenset({
    BookingStatus.APPROVED,
    BookingStatus.PAYMENT_PENDING,
    BookingStatus.CONFIRMED,
})

TERMINAL_STATUSES = frozenset({
    BookingStatus.REJECTED,
    BookingStatus.CANCELLED,
    BookingStatus.COMPLETED,
})


@dataclass(eq=False, kw_only=True)
class Booking(Aggregate):
    """
    Booking Aggregate Root

    Key invariants:
    - The price is fixed at request time and never recomputed
    - Only the owner decides on a request; only the renter pays
    - A booking reaches CONFIRMED only with a captured payment transaction
    """

    listing_id: UUID
    renter_id: UUID
    owner_id: UUID
    dates: DateRange

    # Pricing (minor units), fixed at creation
    price_per_day: int
    total_price: Money
    renter_fee: int = 0
    lister_fee: int = 0
    lister_payout: int = 0

    message: str = ''
    status: BookingStatus = BookingStatus.REQUESTED

    # Payment
    payment_order_id: Optional[str] = None
    payment_transaction_id: Optional[str] = None

    # Decision and cancellation details
    rejection_reason: str = ''
    cancellation_reason: str = ''
    cancelled_by: Optional[UUID] = None

    # Timestamps
    created_at: datetime = field(default_factory=utcnow)
    decided_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @classmethod
    def request(
        cls,
        *,
        listing_id: UUID,
        renter_id: UUID,
        owner_id: UUID,
        dates: DateRange,
        price_per_day: int,
        total_price: Money,
        renter_fee: int = 0,
        lister_fee: int = 0,
        lister_payout: int = 0,
        message: str = '',
    ) -> 'Booking':
        """Create a REQUESTED booking; emits BookingRequested"""
        if renter_id == owner_id:
            raise ValidationError("Owners cannot book their own listing")

        booking = cls(
            id=uuid4(),
            listing_id=listing_id,
            renter_id=renter_id,
            owner_id=owner_id,
            dates=dates,
            price_per_day=price_per_day,
            total_price=total_price,
            renter_fee=renter_fee,
            lister_fee=lister_fee,
            lister_payout=lister_payout,
            message=message,
        )
        booking.add_event(events.BookingRequested(
            **booking._event_refs(),
            dates=dates,
            total_price=total_price,
        ))
        return booking

    # ----------------------------------------------------------- helpers

    def _event_refs(self) -> dict:
        return {
            'booking_id': self.id,
            'listing_id': self.listing_id,
            'renter_id': self.renter_id,
            'owner_id': self.owner_id,
        }

    def _require_status(self, action: str, *allowed: BookingStatus):
        if self.status not in allowed:
            expected = ', '.join(s.value for s in allowed)
            raise InvalidTransitionError(
                f"Cannot {action} booking {self.id} in status {self.status.value} (expected {expected})"
            )

    def _require_owner(self, actor_id: UUID, action: str):
        if actor_id != self.owner_id:
            raise AuthorizationError(f"Only the listing owner can {action} this booking")

    def _require_renter(self, actor_id: UUID, action: str):
        if actor_id != self.renter_id:
            raise AuthorizationError(f"Only the renter can {action} this booking")

    # ------------------------------------------------------- transitions

    def approve(self, actor_id: UUID):
        """
        Owner approves (REQUESTED -> APPROVED)

        The caller must reserve the dates in the same transaction; a failed
        reservation rolls the whole approval back.
        """
        self._require_owner(actor_id, 'approve')
        self._require_status('approve', BookingStatus.REQUESTED)

        self.status = BookingStatus.APPROVED
        self.decided_at = utcnow()
        self.add_event(events.BookingApproved(**self._event_refs(), dates=self.dates))

    def reject(self, actor_id: UUID, reason: str = ''):
        """Owner rejects (REQUESTED -> REJECTED); nothing was reserved"""
        self._require_owner(actor_id, 'reject')
        self._require_status('reject', BookingStatus.REQUESTED)

        self.status = BookingStatus.REJECTED
        self.rejection_reason = reason
        self.decided_at = utcnow()
        self.add_event(events.BookingRejected(**self._event_refs(), reason=reason))

    def check_payment_request(self, actor_id: UUID, amount_minor: int):
        """Guards shared by first payment and retries"""
        self._require_renter(actor_id, 'pay for')
        self._require_status('pay for', BookingStatus.APPROVED, BookingStatus.PAYMENT_PENDING)
        if amount_minor != self.total_price.amount_minor:
            raise ValidationError(
                f"Payment amount {amount_minor} does not match booking total {self.total_price.amount_minor}"
            )

    def initiate_payment(self, actor_id: UUID, order_id: str):
        """
        Renter opens a payment order

        APPROVED -> PAYMENT_PENDING emits PaymentInitiated. From
        PAYMENT_PENDING (retry after a declined capture) the new order is
        attached without a status change.
        """
        self.check_payment_request(actor_id, self.total_price.amount_minor)
        self.payment_order_id = order_id
        if self.status == BookingStatus.PAYMENT_PENDING:
            return

        self.status = BookingStatus.PAYMENT_PENDING
        self.add_event(events.PaymentInitiated(
            **self._event_refs(),
            order_id=order_id,
            amount=self.total_price,
        ))

    def record_payment_failure(self, order_id: str, reason: str):
        """Capture declined (PAYMENT_PENDING -> PAYMENT_PENDING)"""
        self._require_status('record a payment failure for', BookingStatus.PAYMENT_PENDING)
        self.add_event(events.PaymentFailed(**self._event_refs(), order_id=order_id, reason=reason))

    def confirm_payment(self, order_id: str, transaction_id: str):
        """
        Capture succeeded (PAYMENT_PENDING -> CONFIRMED)

        Emits PaymentCaptured for the order and BookingConfirmed for the
        booking. Callers short-circuit when the booking is already
        CONFIRMED, so a repeated capture never confirms twice.
        """
        self._require_status('confirm', BookingStatus.PAYMENT_PENDING)
        if not transaction_id:
            raise ValidationError(f"Capture of order {order_id} returned no transaction id")

        self.payment_order_id = order_id
        self.payment_transaction_id = transaction_id
        self.add_event(events.PaymentCaptured(
            **self._event_refs(),
            order_id=order_id,
            transaction_id=transaction_id,
            amount=self.total_price,
        ))

        self.status = BookingStatus.CONFIRMED
        self.confirmed_at = utcnow()
        self.add_event(events.BookingConfirmed(**self._event_refs(), transaction_id=transaction_id))

    def cancel(self, actor_id: UUID, reason: str = ''):
        """
        Renter or owner cancels (APPROVED / PAYMENT_PENDING / CONFIRMED -> CANCELLED)

        The caller releases the reserved dates in the same transaction.
        """
        if actor_id not in (self.renter_id, self.owner_id):
            raise AuthorizationError("Only the renter or the listing owner can cancel this booking")
        self._require_status('cancel', *RESERVING_STATUSES)

        previous = self.status
        self.status = BookingStatus.CANCELLED
        self.cancellation_reason = reason
        self.cancelled_by = actor_id
        self.cancelled_at = utcnow()
        self.add_event(events.BookingCancelled(
            **self._event_refs(),
            reason=reason,
            cancelled_by=actor_id,
            previous_status=previous.value,
        ))

    def complete(self, today: date):
        """End date passed (CONFIRMED -> COMPLETED)"""
        self._require_status('complete', BookingStatus.CONFIRMED)
        if today <= self.dates.end:
            raise InvalidTransitionError(
                f"Booking {self.id} ends on {self.dates.end.isoformat()} and cannot complete before that"
            )

        self.status = BookingStatus.COMPLETED
        self.completed_at = utcnow()
        self.add_event(events.BookingCompleted(**self._event_refs()))

    # ------------------------------------------------------------ queries

    @property
    def nights(self) -> int:
        return self.dates.nights

    def holds_dates(self) -> bool:
        """True while the booking's range is reserved in the availability index"""
        return self.status in RESERVING_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def __str__(self):
        return f"Booking {self.id} ({self.status.value})"

    def __repr__(self):
        return (
            f"Booking(id={self.id}, listing_id={self.listing_id}, "
            f"status={self.status.value}, dates={self.dates})"
        )
