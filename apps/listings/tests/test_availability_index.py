"""Tests for the availability index."""

from __future__ import annotations

import uuid
from datetime import date
from unittest import mock

from django.test import TestCase, override_settings

from apps.listings.models import Listing, UnavailableDate
from apps.listings.services import ADD, REMOVE, AvailabilityIndex
from shared.domain.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError

TODAY = date(2030, 1, 1)


class AvailabilityIndexTests(TestCase):
    def setUp(self) -> None:
        self.owner_id = uuid.uuid4()
        self.listing = Listing.objects.create(owner_id=self.owner_id, title="Canoe", price_per_day=5000)
        self.other = Listing.objects.create(owner_id=self.owner_id, title="Tent", price_per_day=2000)
        self.index = AvailabilityIndex(today=lambda: TODAY)

    def test_reserve_marks_every_day(self) -> None:
        booking_id = uuid.uuid4()

        days = self.index.reserve(self.listing.id, "2030-01-10", "2030-01-12", booking_id=booking_id)

        self.assertEqual(days, [date(2030, 1, 10), date(2030, 1, 11), date(2030, 1, 12)])
        self.assertEqual(self.index.list_unavailable(self.listing.id), days)
        self.assertTrue(
            UnavailableDate.objects.filter(booking_id=booking_id, source=UnavailableDate.Source.BOOKING).exists()
        )

    def test_overlapping_reserve_raises_conflict_and_writes_nothing(self) -> None:
        self.index.reserve(self.listing.id, "2030-01-10", "2030-01-12", booking_id=uuid.uuid4())

        with self.assertRaises(ConflictError) as ctx:
            self.index.reserve(self.listing.id, "2030-01-12", "2030-01-14", booking_id=uuid.uuid4())

        self.assertEqual(ctx.exception.conflicting_dates, ["2030-01-12"])
        self.assertEqual(UnavailableDate.objects.filter(listing=self.listing).count(), 3)

    def test_reserve_refuses_past_start(self) -> None:
        with self.assertRaises(ValidationError):
            self.index.reserve(self.listing.id, "2029-12-31", "2030-01-02", booking_id=uuid.uuid4())

        self.assertEqual(UnavailableDate.objects.count(), 0)

    def test_unique_day_constraint_surfaces_as_conflict(self) -> None:
        self.index.reserve(self.listing.id, "2030-01-10", "2030-01-12", booking_id=uuid.uuid4())

        # A writer that got past the range check without the listing lock
        with mock.patch.object(self.index, "ensure_range_free"):
            with self.assertRaises(ConflictError) as ctx:
                self.index.reserve(self.listing.id, "2030-01-12", "2030-01-14", booking_id=uuid.uuid4())

        self.assertEqual(ctx.exception.conflicting_dates, ["2030-01-12"])
        self.assertEqual(UnavailableDate.objects.count(), 3)

    def test_listings_are_independent(self) -> None:
        self.index.reserve(self.listing.id, "2030-01-10", "2030-01-12", booking_id=uuid.uuid4())

        self.assertTrue(self.index.is_range_free(self.other.id, "2030-01-10", "2030-01-12"))

    def test_is_range_free_rejects_past_start(self) -> None:
        self.assertFalse(self.index.is_range_free(self.listing.id, "2029-12-31", "2030-01-02"))
        self.assertTrue(self.index.is_range_free(self.listing.id, "2030-01-01", "2030-01-02"))
        self.assertTrue(
            self.index.is_range_free(self.listing.id, "2029-12-31", "2030-01-02", today=date(2029, 12, 1))
        )

    def test_release_is_idempotent_and_scoped_to_booking(self) -> None:
        booking_id = uuid.uuid4()
        self.index.reserve(self.listing.id, "2030-01-10", "2030-01-11", booking_id=booking_id)
        self.index.mutate(self.listing.id, ["2030-01-12"], ADD, self.owner_id)

        self.assertEqual(self.index.release(self.listing.id, "2030-01-10", "2030-01-12", booking_id=booking_id), 2)
        self.assertEqual(self.index.release(self.listing.id, "2030-01-10", "2030-01-12", booking_id=booking_id), 0)
        self.assertEqual(self.index.list_unavailable(self.listing.id), [date(2030, 1, 12)])

    def test_inverted_range_is_a_validation_error(self) -> None:
        with self.assertRaises(ValidationError):
            self.index.reserve(self.listing.id, "2030-01-12", "2030-01-10")

    def test_unknown_listing(self) -> None:
        with self.assertRaises(NotFoundError):
            self.index.list_unavailable(uuid.uuid4())


class MutateTests(TestCase):
    def setUp(self) -> None:
        self.owner_id = uuid.uuid4()
        self.listing = Listing.objects.create(owner_id=self.owner_id, price_per_day=5000)
        self.index = AvailabilityIndex(today=lambda: TODAY)

    def test_add_skips_days_already_blocked(self) -> None:
        self.index.mutate(self.listing.id, ["2030-02-01"], ADD, self.owner_id)

        changed = self.index.mutate(self.listing.id, ["2030-02-01", "2030-02-02", "2030-02-02"], ADD, self.owner_id)

        self.assertEqual(changed, [date(2030, 2, 2)])
        self.assertEqual(len(self.index.list_unavailable(self.listing.id)), 2)

    def test_only_owner_can_mutate(self) -> None:
        with self.assertRaises(AuthorizationError):
            self.index.mutate(self.listing.id, ["2030-02-01"], ADD, uuid.uuid4())

    def test_past_day_cannot_be_blocked(self) -> None:
        with self.assertRaises(ValidationError):
            self.index.mutate(self.listing.id, ["2029-12-31"], ADD, self.owner_id)

    def test_remove_refuses_days_held_by_a_booking(self) -> None:
        self.index.reserve(self.listing.id, "2030-02-01", "2030-02-01", booking_id=uuid.uuid4())

        with self.assertRaises(ConflictError):
            self.index.mutate(self.listing.id, ["2030-02-01"], REMOVE, self.owner_id)

        self.assertEqual(self.index.list_unavailable(self.listing.id), [date(2030, 2, 1)])

    def test_remove_deletes_manual_blocks(self) -> None:
        self.index.mutate(self.listing.id, ["2030-02-01", "2030-02-02"], ADD, self.owner_id)

        changed = self.index.mutate(self.listing.id, ["2030-02-02", "2030-02-03"], REMOVE, self.owner_id)

        self.assertEqual(changed, [date(2030, 2, 2)])
        self.assertEqual(self.index.list_unavailable(self.listing.id), [date(2030, 2, 1)])

    def test_unknown_op_and_empty_dates(self) -> None:
        with self.assertRaises(ValidationError):
            self.index.mutate(self.listing.id, ["2030-02-01"], "toggle", self.owner_id)
        with self.assertRaises(ValidationError):
            self.index.mutate(self.listing.id, [], ADD, self.owner_id)


class ListingCurrencyTests(TestCase):
    @override_settings(BOOKING_CURRENCY="EUR")
    def test_new_listing_uses_configured_currency(self) -> None:
        listing = Listing.objects.create(owner_id=uuid.uuid4(), title="Kayak", price_per_day=3000)

        self.assertEqual(listing.currency, "EUR")
