"""
Booking Domain Events

One event per lifecycle transition. They are appended to the event feed in
the same transaction as the transition and published to subscribers after
commit. Delivery (push, email, in-app) belongs to external dispatchers.
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from shared.domain.base import DomainEvent
from shared.domain.value_objects import DateRange, Money, to_date_key


@dataclass(kw_only=True)
class BookingRequested(DomainEvent):
    """
    Event: A renter asked for a date range (-> REQUESTED)

    Triggers:
    - Notify the listing owner about a new request
    """
    dates: DateRange
    total_price: Money

    def payload(self) -> dict:
        return {
            'start_date': to_date_key(self.dates.start),
            'end_date': to_date_key(self.dates.end),
            'total_price': self.total_price.amount_minor,
            'currency': self.total_price.currency,
        }


@dataclass(kw_only=True)
class BookingApproved(DomainEvent):
    """
    Event: Owner approved, dates are now reserved (REQUESTED -> APPROVED)

    Triggers:
    - Ask the renter to pay
    """
    dates: DateRange

    def payload(self) -> dict:
        return {'start_date': to_date_key(self.dates.start), 'end_date': to_date_key(self.dates.end)}


@dataclass(kw_only=True)
class BookingRejected(DomainEvent):
    """Event: Owner declined the request (REQUESTED -> REJECTED)"""
    reason: str = ''

    def payload(self) -> dict:
        return {'reason': self.reason}


@dataclass(kw_only=True)
class PaymentInitiated(DomainEvent):
    """Event: Renter opened a payment order (APPROVED -> PAYMENT_PENDING)"""
    order_id: str
    amount: Money

    def payload(self) -> dict:
        return {'order_id': self.order_id, 'amount': self.amount.amount_minor, 'currency': self.amount.currency}


@dataclass(kw_only=True)
class PaymentFailed(DomainEvent):
    """
    Event: Provider declined a capture (PAYMENT_PENDING -> PAYMENT_PENDING)

    The booking stays payable; the renter may retry with a fresh order.
    """
    order_id: str
    reason: str = ''

    def payload(self) -> dict:
        return {'order_id': self.order_id, 'reason': self.reason}


@dataclass(kw_only=True)
class PaymentCaptured(DomainEvent):
    """
    Event: Money was captured for an order

    Triggers:
    - Notify the owner about the payment
    """
    order_id: str
    transaction_id: str
    amount: Money

    def payload(self) -> dict:
        return {
            'order_id': self.order_id,
            'transaction_id': self.transaction_id,
            'amount': self.amount.amount_minor,
            'currency': self.amount.currency,
        }


@dataclass(kw_only=True)
class BookingConfirmed(DomainEvent):
    """
    Event: Booking is paid and confirmed (PAYMENT_PENDING -> CONFIRMED)

    Triggers:
    - Send the confirmation to the renter
    """
    transaction_id: str

    def payload(self) -> dict:
        return {'transaction_id': self.transaction_id}


@dataclass(kw_only=True)
class BookingCancelled(DomainEvent):
    """
    Event: Renter or owner cancelled; dates were released

    Triggers:
    - Refund handling (outside the core)
    - Notify the other party
    """
    reason: str = ''
    cancelled_by: Optional[UUID] = None
    previous_status: str = ''

    def payload(self) -> dict:
        return {
            'reason': self.reason,
            'cancelled_by': str(self.cancelled_by) if self.cancelled_by else None,
            'previous_status': self.previous_status,
        }


@dataclass(kw_only=True)
class BookingCompleted(DomainEvent):
    """
    Event: The rental period ended (CONFIRMED -> COMPLETED)

    Triggers:
    - Request a review
    - Schedule the owner payout
    """


BOOKING_EVENTS = (
    BookingRequested,
    BookingApproved,
    BookingRejected,
    PaymentInitiated,
    PaymentFailed,
    PaymentCaptured,
    BookingConfirmed,
    BookingCancelled,
    BookingCompleted,
)
