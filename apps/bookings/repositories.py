"""
Booking Repository

Maps the Booking aggregate to the Booking ORM row and back. Handlers load
with `lock=True` inside their unit of work so transitions of one booking
are serialized.
"""

from datetime import date
from typing import List
from uuid import UUID
import logging

from shared.domain.exceptions import NotFoundError
from shared.domain.value_objects import DateRange, Money
from shared.infrastructure.locking import lock_queryset_if_possible
from apps.bookings.domain.entities import Booking, BookingStatus
from apps.bookings.models import Booking as BookingModel

logger = logging.getLogger(__name__)


class DjangoBookingRepository:
    """Booking persistence backed by the Django ORM"""

    def get_by_id(self, booking_id: UUID, *, lock: bool = False) -> Booking:
        queryset = BookingModel.objects.filter(pk=booking_id)
        if lock:
            queryset = lock_queryset_if_possible(queryset)
        row = queryset.first()
        if row is None:
            raise NotFoundError(f"Booking {booking_id} not found")
        return self._to_domain(row)

    def save(self, booking: Booking) -> None:
        BookingModel.objects.update_or_create(pk=booking.id, defaults=self._to_fields(booking))
        logger.debug(f"Saved booking {booking.id} ({booking.status.value})")

    def confirmed_ending_before(self, today: date) -> List[UUID]:
        """Ids of confirmed bookings whose last day is before `today`"""
        return list(
            BookingModel.objects.filter(
                status=BookingModel.Status.CONFIRMED,
                end_date__lt=today,
            ).order_by('end_date').values_list('id', flat=True)
        )

    @staticmethod
    def _to_fields(booking: Booking) -> dict:
        return {
            'listing_id': booking.listing_id,
            'renter_id': booking.renter_id,
            'owner_id': booking.owner_id,
            'start_date': booking.dates.start,
            'end_date': booking.dates.end,
            'status': booking.status.value,
            'message': booking.message,
            'price_per_day': booking.price_per_day,
            'nights': booking.nights,
            'renter_fee': booking.renter_fee,
            'lister_fee': booking.lister_fee,
            'lister_payout': booking.lister_payout,
            'total_price': booking.total_price.amount_minor,
            'currency': booking.total_price.currency,
            'payment_order_id': booking.payment_order_id,
            'payment_transaction_id': booking.payment_transaction_id,
            'rejection_reason': booking.rejection_reason,
            'cancellation_reason': booking.cancellation_reason,
            'cancelled_by': booking.cancelled_by,
            'created_at': booking.created_at,
            'decided_at': booking.decided_at,
            'confirmed_at': booking.confirmed_at,
            'cancelled_at': booking.cancelled_at,
            'completed_at': booking.completed_at,
        }

    @staticmethod
    def _to_domain(row: BookingModel) -> Booking:
        return Booking(
            id=row.id,
            listing_id=row.listing_id,
            renter_id=row.renter_id,
            owner_id=row.owner_id,
            dates=DateRange(row.start_date, row.end_date),
            price_per_day=row.price_per_day,
            total_price=Money(row.total_price, row.currency),
            renter_fee=row.renter_fee,
            lister_fee=row.lister_fee,
            lister_payout=row.lister_payout,
            message=row.message,
            status=BookingStatus(row.status),
            payment_order_id=row.payment_order_id,
            payment_transaction_id=row.payment_transaction_id,
            rejection_reason=row.rejection_reason,
            cancellation_reason=row.cancellation_reason,
            cancelled_by=row.cancelled_by,
            created_at=row.created_at,
            decided_at=row.decided_at,
            confirmed_at=row.confirmed_at,
            cancelled_at=row.cancelled_at,
            completed_at=row.completed_at,
        )
