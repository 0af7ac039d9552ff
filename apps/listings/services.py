"""Availability index: conflict queries and atomic calendar mutations."""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List, Optional
from uuid import UUID

from django.db import IntegrityError, transaction  # type: ignore
from django.utils import timezone  # type: ignore

from shared.domain.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from shared.domain.value_objects import DateRange, parse_date_key, to_date_key
from shared.infrastructure.locking import lock_queryset_if_possible

from .models import Listing, UnavailableDate

logger = logging.getLogger(__name__)

ADD = "add"
REMOVE = "remove"


class AvailabilityIndex:
    """
    Per-listing calendar of unavailable days.

    Every mutation locks the listing row first, so writers for one listing
    are linearized while other listings proceed in parallel. The unique
    (listing, day) constraint backs the check in case a backend ignores
    row locks.
    """

    def __init__(self, today=None):
        self._today = today or timezone.localdate

    def today(self) -> date:
        return self._today()

    def get_listing(self, listing_id: UUID, *, lock: bool = False) -> Listing:
        queryset = Listing.objects.filter(pk=listing_id)
        if lock:
            queryset = lock_queryset_if_possible(queryset)
        listing = queryset.first()
        if listing is None:
            raise NotFoundError(f"Listing {listing_id} not found")
        return listing

    def conflicting_days(
        self,
        listing_id: UUID,
        dates: DateRange,
        *,
        exclude_booking_id: Optional[UUID] = None,
    ) -> List[date]:
        """Unavailable days of the listing that fall inside `dates`."""
        queryset = UnavailableDate.objects.filter(
            listing_id=listing_id,
            day__gte=dates.start,
            day__lte=dates.end,
        )
        if exclude_booking_id is not None:
            queryset = queryset.exclude(booking_id=exclude_booking_id)
        return list(queryset.order_by("day").values_list("day", flat=True))

    def is_range_free(self, listing_id: UUID, start, end, today: Optional[date] = None) -> bool:
        """True when no day of the range is blocked and the range does not start in the past."""
        dates = DateRange.from_keys(start, end)
        self.get_listing(listing_id)
        if dates.start < (today or self.today()):
            return False
        return not self.conflicting_days(listing_id, dates)

    def ensure_range_free(self, listing_id: UUID, dates: DateRange) -> None:
        """Raise ConflictError naming the blocked days if any."""
        conflicts = self.conflicting_days(listing_id, dates)
        if conflicts:
            raise ConflictError(
                f"Listing {listing_id} is unavailable for {len(conflicts)} day(s) in {dates}",
                conflicting_dates=conflicts,
            )

    def reserve(self, listing_id: UUID, start, end, *, booking_id: Optional[UUID] = None) -> List[date]:
        """
        Atomically mark every day of the range as unavailable.

        Compare-and-set: the range is re-checked under the listing lock and
        nothing is written when it starts in the past or any day is already
        taken.
        """
        dates = DateRange.from_keys(start, end)
        source = UnavailableDate.Source.BOOKING if booking_id else UnavailableDate.Source.MANUAL

        with transaction.atomic():
            self.get_listing(listing_id, lock=True)
            if dates.start < self.today():
                raise ValidationError(f"Cannot reserve {dates}: start date {to_date_key(dates.start)} is in the past")
            self.ensure_range_free(listing_id, dates)
            days = list(dates.days())
            try:
                with transaction.atomic():
                    UnavailableDate.objects.bulk_create(
                        [
                            UnavailableDate(listing_id=listing_id, day=day, booking_id=booking_id, source=source)
                            for day in days
                        ]
                    )
            except IntegrityError:
                logger.warning(f"Concurrent reservation detected for listing {listing_id} in {dates}")
                raise ConflictError(
                    f"Listing {listing_id} was reserved concurrently for {dates}",
                    conflicting_dates=self.conflicting_days(listing_id, dates),
                )

        logger.info(f"Reserved {len(days)} day(s) {dates} on listing {listing_id} (booking {booking_id})")
        return days

    def release(self, listing_id: UUID, start, end, *, booking_id: Optional[UUID] = None) -> int:
        """
        Remove unavailable days in the range.

        Idempotent: days that are already free are skipped. With a booking id
        only the rows held by that booking are removed.
        """
        dates = DateRange.from_keys(start, end)
        with transaction.atomic():
            self.get_listing(listing_id, lock=True)
            queryset = UnavailableDate.objects.filter(
                listing_id=listing_id,
                day__gte=dates.start,
                day__lte=dates.end,
            )
            if booking_id is not None:
                queryset = queryset.filter(booking_id=booking_id)
            deleted, _ = queryset.delete()

        logger.info(f"Released {deleted} day(s) {dates} on listing {listing_id} (booking {booking_id})")
        return deleted

    def list_unavailable(self, listing_id: UUID) -> List[date]:
        self.get_listing(listing_id)
        return list(
            UnavailableDate.objects.filter(listing_id=listing_id).order_by("day").values_list("day", flat=True)
        )

    def mutate(self, listing_id: UUID, dates: Iterable, op: str, actor_id: UUID) -> List[date]:
        """
        Owner edit of manual blocks.

        `add` skips days that are already blocked; `remove` refuses to free a
        day held by a booking. Returns the days that actually changed.
        """
        if op not in (ADD, REMOVE):
            raise ValidationError(f"Unknown operation {op!r}; expected 'add' or 'remove'")
        days = sorted({parse_date_key(value) for value in dates})
        if not days:
            raise ValidationError("At least one date is required")

        with transaction.atomic():
            listing = self.get_listing(listing_id, lock=True)
            if listing.owner_id != actor_id:
                raise AuthorizationError("Only the listing owner can change unavailable dates")

            existing = {
                row.day: row
                for row in UnavailableDate.objects.filter(listing_id=listing_id, day__in=days)
            }

            if op == ADD:
                if days[0] < self.today():
                    raise ValidationError(f"Cannot block a past date: {to_date_key(days[0])}")
                changed = [day for day in days if day not in existing]
                UnavailableDate.objects.bulk_create(
                    [UnavailableDate(listing_id=listing_id, day=day) for day in changed]
                )
            else:
                held = [day for day, row in existing.items() if row.source == UnavailableDate.Source.BOOKING]
                if held:
                    raise ConflictError("Dates held by a booking cannot be removed", conflicting_dates=held)
                changed = sorted(existing)
                UnavailableDate.objects.filter(listing_id=listing_id, day__in=changed).delete()

        logger.info(f"Owner {actor_id} {op} {len(changed)} unavailable day(s) on listing {listing_id}")
        return changed
