"""Event feed writer and the default bus subscribers."""

from __future__ import annotations

import logging
from typing import Iterable, List

from shared.domain.base import DomainEvent

from .models import BookingEvent

logger = logging.getLogger(__name__)


class DjangoEventStore:
    """
    Appends domain events to the BookingEvent feed.

    Called by the unit of work inside the booking transaction, so a feed row
    exists exactly when its transition committed.
    """

    def append(self, events: Iterable[DomainEvent]) -> List[BookingEvent]:
        rows = [
            BookingEvent(
                event_id=event.event_id,
                event_type=event.event_type,
                booking_id=event.booking_id,
                listing_id=event.listing_id,
                renter_id=event.renter_id,
                owner_id=event.owner_id,
                occurred_at=event.occurred_at,
                payload=event.payload(),
            )
            for event in events
        ]
        # One INSERT per row keeps the sequence in raise order on every backend
        for row in rows:
            row.save()
        logger.debug(f"Appended {len(rows)} event(s) to the booking feed")
        return rows


def log_booking_event(event: DomainEvent) -> None:
    """Default subscriber: one structured log line per committed event."""
    logger.info(
        f"{event.event_type} booking={event.booking_id} listing={event.listing_id} "
        f"renter={event.renter_id} owner={event.owner_id} payload={event.payload()}"
    )
