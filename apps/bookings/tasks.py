"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from celery import shared_task  # type: ignore
from django.utils import timezone  # type: ignore

from shared.domain.exceptions import DomainError

from .application.bootstrap import bootstrap
from .application.command_handlers import CompleteBookingCommand
from .repositories import DjangoBookingRepository

logger = logging.getLogger(__name__)


@shared_task(name="bookings.complete_finished_bookings")
def complete_finished_bookings(today: Optional[str] = None) -> dict[str, int]:
    """
    Complete confirmed bookings whose end date has passed.

    Runs hourly via Celery Beat. `today` (YYYY-MM-DD) overrides the current
    date. A booking that fails to complete is logged and retried on the
    next run.

    Returns:
        dict: {"completed": ..., "failed": ...}
    """
    day = date.fromisoformat(today) if today else timezone.localdate()
    bus = bootstrap(today=lambda: day)
    completed = failed = 0

    for booking_id in DjangoBookingRepository().confirmed_ending_before(day):
        try:
            bus.handle_command(CompleteBookingCommand(booking_id=booking_id, today=day))
            completed += 1
        except DomainError as e:
            failed += 1
            logger.error(f"Error completing booking {booking_id}: {e}", exc_info=True)

    if completed or failed:
        logger.info(f"Completed {completed} booking(s), {failed} failed")

    return {"completed": completed, "failed": failed}
