"""Parallel captures and approvals against a database with row locks."""

from __future__ import annotations

import threading
import uuid
from datetime import date

from django.db import connection
from django.test import TransactionTestCase, skipUnlessDBFeature

from apps.bookings.application.bootstrap import bootstrap
from apps.bookings.application.command_handlers import (
    CaptureOrderCommand,
    CreatePaymentOrderCommand,
    DecideBookingCommand,
    RequestBookingCommand,
)
from apps.bookings.models import Booking as BookingModel
from apps.listings.models import Listing, UnavailableDate
from apps.notifications.models import BookingEvent
from apps.payments.gateway import SandboxGateway
from shared.domain.exceptions import ConflictError

TODAY = date(2030, 1, 1)
WORKERS = 4


def run_in_parallel(calls):
    """Start every call at the same moment; return (results, errors) in call order."""
    barrier = threading.Barrier(len(calls))
    results = [None] * len(calls)
    errors = [None] * len(calls)

    def worker(index, call):
        try:
            barrier.wait()
            results[index] = call()
        except Exception as e:  # collected for the assertions
            errors[index] = e
        finally:
            connection.close()

    threads = [threading.Thread(target=worker, args=(i, call)) for i, call in enumerate(calls)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)
    return results, errors


@skipUnlessDBFeature("has_select_for_update")
class ConcurrentCommandTests(TransactionTestCase):
    def setUp(self) -> None:
        self.owner_id = uuid.uuid4()
        self.listing = Listing.objects.create(owner_id=self.owner_id, title="Canoe", price_per_day=5000)
        self.gateway = SandboxGateway()

    def bus(self):
        return bootstrap(gateway=self.gateway, today=lambda: TODAY)

    def request(self, start, end):
        return self.bus().handle_command(
            RequestBookingCommand(
                listing_id=self.listing.id,
                renter_id=uuid.uuid4(),
                start_date=date.fromisoformat(start),
                end_date=date.fromisoformat(end),
            )
        )

    def approve_call(self, booking):
        command = DecideBookingCommand(booking_id=booking.id, decision="approve", actor_id=self.owner_id)
        return lambda: self.bus().handle_command(command)

    def test_parallel_captures_confirm_once(self) -> None:
        booking = self.request("2030-01-10", "2030-01-12")
        self.approve_call(booking)()
        order = self.bus().handle_command(
            CreatePaymentOrderCommand(
                booking_id=booking.id,
                amount_minor_units=booking.total_price.amount_minor,
                actor_id=booking.renter_id,
            )
        )
        command = CaptureOrderCommand(order_id=order.order_id)

        results, errors = run_in_parallel([lambda: self.bus().handle_command(command)] * WORKERS)

        self.assertEqual(errors, [None] * WORKERS)
        self.assertEqual(len({outcome.transaction_id for outcome in results}), 1)
        self.assertEqual(sum(not outcome.already_captured for outcome in results), 1)
        self.assertEqual(self.gateway.capture_calls, 1)
        row = BookingModel.objects.get(pk=booking.id)
        self.assertEqual(row.status, "confirmed")
        self.assertEqual(row.payment_transaction_id, results[0].transaction_id)
        self.assertEqual(
            BookingEvent.objects.filter(booking_id=booking.id, event_type="BookingConfirmed").count(),
            1,
        )

    def test_parallel_overlapping_approvals_have_one_winner(self) -> None:
        bookings = [
            self.request("2030-01-10", "2030-01-12"),
            self.request("2030-01-11", "2030-01-13"),
            self.request("2030-01-12", "2030-01-14"),
        ]

        results, errors = run_in_parallel([self.approve_call(booking) for booking in bookings])

        winners = [booking for booking, result in zip(bookings, results) if result is not None]
        self.assertEqual(len(winners), 1)
        self.assertEqual(sum(isinstance(error, ConflictError) for error in errors), 2)
        statuses = sorted(BookingModel.objects.values_list("status", flat=True))
        self.assertEqual(statuses, ["approved", "requested", "requested"])
        self.assertEqual(
            set(UnavailableDate.objects.values_list("booking_id", flat=True)),
            {winners[0].id},
        )
        self.assertEqual(UnavailableDate.objects.count(), 3)
