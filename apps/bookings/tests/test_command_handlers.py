"""Tests for the booking command handlers against the database."""

from __future__ import annotations

import uuid
from datetime import date

from django.test import TestCase

from apps.bookings.application.bootstrap import bootstrap
from apps.bookings.application.command_handlers import (
    CancelBookingCommand,
    CaptureOrderCommand,
    CompleteBookingCommand,
    CreatePaymentOrderCommand,
    DecideBookingCommand,
    RequestBookingCommand,
)
from apps.bookings.domain.entities import BookingStatus, InvalidTransitionError
from apps.bookings.domain.events import BookingConfirmed
from apps.bookings.models import Booking as BookingModel
from apps.listings.models import Listing, UnavailableDate
from apps.listings.services import AvailabilityIndex
from apps.notifications.models import BookingEvent
from apps.payments.gateway import SandboxGateway
from apps.payments.models import PaymentOrder
from shared.domain.exceptions import (
    AuthorizationError,
    ConflictError,
    GatewayError,
    GatewayRejection,
    ValidationError,
)

TODAY = date(2030, 1, 1)


class HandlerTestCase(TestCase):
    def setUp(self) -> None:
        self.owner_id = uuid.uuid4()
        self.renter_id = uuid.uuid4()
        self.listing = Listing.objects.create(
            owner_id=self.owner_id,
            title="Canoe",
            price_per_day=5000,
            payee_merchant_id="MERCHANT-1",
        )
        self.gateway = SandboxGateway()
        self.bus = bootstrap(gateway=self.gateway, today=lambda: TODAY)
        self.index = AvailabilityIndex(today=lambda: TODAY)

    def request(self, start="2030-01-10", end="2030-01-12", renter_id=None):
        return self.bus.handle_command(
            RequestBookingCommand(
                listing_id=self.listing.id,
                renter_id=renter_id or self.renter_id,
                start_date=date.fromisoformat(start),
                end_date=date.fromisoformat(end),
            )
        )

    def approve(self, booking):
        return self.bus.handle_command(
            DecideBookingCommand(booking_id=booking.id, decision="approve", actor_id=self.owner_id)
        )

    def open_order(self, booking):
        return self.bus.handle_command(
            CreatePaymentOrderCommand(
                booking_id=booking.id,
                amount_minor_units=booking.total_price.amount_minor,
                actor_id=booking.renter_id,
            )
        )

    def capture(self, order_id):
        return self.bus.handle_command(CaptureOrderCommand(order_id=order_id))

    def status_of(self, booking) -> str:
        return BookingModel.objects.get(pk=booking.id).status

    def feed_types(self, booking) -> list[str]:
        return list(
            BookingEvent.objects.filter(booking_id=booking.id).order_by("sequence").values_list("event_type", flat=True)
        )


class RequestBookingTests(HandlerTestCase):
    def test_request_prices_once_and_reserves_nothing(self) -> None:
        booking = self.request()

        row = BookingModel.objects.get(pk=booking.id)
        self.assertEqual(row.status, "requested")
        self.assertEqual(row.nights, 3)
        self.assertEqual(row.total_price, 16050)
        self.assertEqual(row.lister_payout, 14550)
        self.assertEqual(row.owner_id, self.owner_id)
        self.assertEqual(UnavailableDate.objects.count(), 0)
        self.assertEqual(self.feed_types(booking), ["BookingRequested"])

    def test_conflicting_request_creates_no_booking(self) -> None:
        self.index.mutate(self.listing.id, ["2030-01-11"], "add", self.owner_id)

        with self.assertRaises(ConflictError) as ctx:
            self.request()

        self.assertEqual(ctx.exception.conflicting_dates, ["2030-01-11"])
        self.assertEqual(BookingModel.objects.count(), 0)
        self.assertEqual(BookingEvent.objects.count(), 0)

    def test_past_start_and_inactive_listing_are_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            self.request(start="2029-12-31", end="2030-01-02")

        Listing.objects.filter(pk=self.listing.id).update(is_active=False)
        with self.assertRaises(ValidationError):
            self.request()

        self.assertEqual(BookingModel.objects.count(), 0)

    def test_owner_cannot_request_own_listing(self) -> None:
        with self.assertRaises(ValidationError):
            self.request(renter_id=self.owner_id)


class DecisionTests(HandlerTestCase):
    def test_approval_reserves_range(self) -> None:
        booking = self.approve(self.request())

        self.assertEqual(booking.status, BookingStatus.APPROVED)
        self.assertEqual(
            self.index.list_unavailable(self.listing.id),
            [date(2030, 1, 10), date(2030, 1, 11), date(2030, 1, 12)],
        )

    def test_rejection_leaves_availability_unchanged(self) -> None:
        booking = self.request()

        self.bus.handle_command(
            DecideBookingCommand(booking_id=booking.id, decision="reject", actor_id=self.owner_id, reason="busy")
        )

        self.assertEqual(self.status_of(booking), "rejected")
        self.assertEqual(self.index.list_unavailable(self.listing.id), [])

    def test_first_approved_wins(self) -> None:
        first = self.request("2030-01-10", "2030-01-12")
        second = self.request("2030-01-12", "2030-01-14", renter_id=uuid.uuid4())

        self.approve(second)
        with self.assertRaises(ConflictError) as ctx:
            self.approve(first)

        self.assertEqual(ctx.exception.conflicting_dates, ["2030-01-12"])
        self.assertEqual(self.status_of(first), "requested")
        self.assertFalse(UnavailableDate.objects.filter(booking_id=first.id).exists())
        self.assertEqual(self.feed_types(first), ["BookingRequested"])

    def test_approval_after_start_date_passed_is_refused(self) -> None:
        booking = self.request("2030-01-10", "2030-01-12")
        late_bus = bootstrap(gateway=self.gateway, today=lambda: date(2030, 1, 11))

        with self.assertRaises(ValidationError):
            late_bus.handle_command(
                DecideBookingCommand(booking_id=booking.id, decision="approve", actor_id=self.owner_id)
            )

        self.assertEqual(self.status_of(booking), "requested")
        self.assertEqual(UnavailableDate.objects.count(), 0)
        self.assertEqual(self.feed_types(booking), ["BookingRequested"])

    def test_only_owner_decides_once(self) -> None:
        booking = self.request()

        with self.assertRaises(AuthorizationError):
            self.bus.handle_command(
                DecideBookingCommand(booking_id=booking.id, decision="approve", actor_id=self.renter_id)
            )

        self.approve(booking)
        with self.assertRaises(InvalidTransitionError):
            self.approve(booking)


class PaymentTests(HandlerTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.booking = self.approve(self.request())

    def test_wrong_amount_or_actor_creates_no_order(self) -> None:
        with self.assertRaises(ValidationError):
            self.bus.handle_command(
                CreatePaymentOrderCommand(booking_id=self.booking.id, amount_minor_units=15000, actor_id=self.renter_id)
            )
        with self.assertRaises(AuthorizationError):
            self.bus.handle_command(
                CreatePaymentOrderCommand(booking_id=self.booking.id, amount_minor_units=16050, actor_id=self.owner_id)
            )

        self.assertEqual(PaymentOrder.objects.count(), 0)
        self.assertEqual(self.status_of(self.booking), "approved")

    def test_open_order_is_reused(self) -> None:
        first = self.open_order(self.booking)
        second = self.open_order(self.booking)

        self.assertTrue(first.created)
        self.assertFalse(second.created)
        self.assertEqual(first.order_id, second.order_id)
        self.assertEqual(self.status_of(self.booking), "payment_pending")
        order = PaymentOrder.objects.get()
        self.assertEqual(order.amount, 16050)
        self.assertEqual(order.platform_fee, 1500)

    def test_gateway_outage_on_create_changes_nothing(self) -> None:
        self.gateway.unavailable = True

        with self.assertRaises(GatewayError):
            self.open_order(self.booking)

        self.assertEqual(PaymentOrder.objects.count(), 0)
        self.assertEqual(self.status_of(self.booking), "approved")

    def test_capture_confirms_exactly_once(self) -> None:
        order = self.open_order(self.booking)

        first = self.capture(order.order_id)
        second = self.capture(order.order_id)

        self.assertEqual(first.status, "confirmed")
        self.assertFalse(first.already_captured)
        self.assertTrue(second.already_captured)
        self.assertEqual(first.transaction_id, second.transaction_id)
        self.assertEqual(self.gateway.capture_calls, 1)
        self.assertEqual(self.feed_types(self.booking).count("BookingConfirmed"), 1)
        self.assertEqual(
            BookingModel.objects.get(pk=self.booking.id).payment_transaction_id,
            first.transaction_id,
        )

    def test_capture_reconciles_provider_side_capture(self) -> None:
        order = self.open_order(self.booking)
        # Provider charged but the core never recorded it
        charged = self.gateway.capture_order(order.order_id)

        outcome = self.capture(order.order_id)

        self.assertTrue(outcome.already_captured)
        self.assertEqual(outcome.transaction_id, charged.transaction_id)
        self.assertEqual(self.status_of(self.booking), "confirmed")

    def test_declined_capture_allows_retry_with_new_order(self) -> None:
        order = self.open_order(self.booking)
        self.gateway.declined_orders.add(order.order_id)

        with self.assertRaises(GatewayRejection):
            self.capture(order.order_id)

        self.assertEqual(PaymentOrder.objects.get(pk=order.order_id).status, "failed")
        self.assertEqual(self.status_of(self.booking), "payment_pending")
        self.assertIn("PaymentFailed", self.feed_types(self.booking))

        retry = self.open_order(self.booking)
        self.assertTrue(retry.created)
        self.assertNotEqual(retry.order_id, order.order_id)
        self.assertEqual(self.capture(retry.order_id).status, "confirmed")

    def test_capture_timeout_mutates_nothing(self) -> None:
        order = self.open_order(self.booking)
        self.gateway.unavailable = True

        with self.assertRaises(GatewayError):
            self.capture(order.order_id)

        self.assertEqual(PaymentOrder.objects.get(pk=order.order_id).status, "created")
        self.assertEqual(self.status_of(self.booking), "payment_pending")

    def test_capture_after_cancellation_conflicts(self) -> None:
        order = self.open_order(self.booking)
        self.bus.handle_command(CancelBookingCommand(booking_id=self.booking.id, actor_id=self.renter_id))

        with self.assertRaises(ConflictError):
            self.capture(order.order_id)

        self.assertEqual(self.gateway.capture_calls, 0)

    def test_subscribers_receive_events_after_commit(self) -> None:
        received = []
        bus = bootstrap(gateway=self.gateway, today=lambda: TODAY, subscribers=[(BookingConfirmed, received.append)])
        order = self.open_order(self.booking)

        with self.captureOnCommitCallbacks(execute=True):
            bus.handle_command(CaptureOrderCommand(order_id=order.order_id))

        self.assertEqual(len(received), 1)
        self.assertEqual(received[0].booking_id, self.booking.id)


class CancelAndCompleteTests(HandlerTestCase):
    def confirmed_booking(self):
        booking = self.approve(self.request())
        order = self.open_order(booking)
        self.capture(order.order_id)
        return booking

    def test_cancel_releases_dates(self) -> None:
        booking = self.confirmed_booking()

        cancelled = self.bus.handle_command(
            CancelBookingCommand(booking_id=booking.id, actor_id=self.owner_id, reason="repairs")
        )

        self.assertEqual(cancelled.status, BookingStatus.CANCELLED)
        self.assertEqual(self.index.list_unavailable(self.listing.id), [])
        self.assertEqual(self.feed_types(booking)[-1], "BookingCancelled")

    def test_requested_booking_cannot_be_cancelled(self) -> None:
        booking = self.request()

        with self.assertRaises(InvalidTransitionError):
            self.bus.handle_command(CancelBookingCommand(booking_id=booking.id, actor_id=self.renter_id))

    def test_complete_after_end_date(self) -> None:
        booking = self.confirmed_booking()

        with self.assertRaises(InvalidTransitionError):
            self.bus.handle_command(CompleteBookingCommand(booking_id=booking.id, today=date(2030, 1, 12)))

        completed = self.bus.handle_command(CompleteBookingCommand(booking_id=booking.id, today=date(2030, 1, 13)))

        self.assertEqual(completed.status, BookingStatus.COMPLETED)
        self.assertEqual(self.index.list_unavailable(self.listing.id), [])
        self.assertEqual(
            self.feed_types(booking),
            [
                "BookingRequested",
                "BookingApproved",
                "PaymentInitiated",
                "PaymentCaptured",
                "BookingConfirmed",
                "BookingCompleted",
            ],
        )
