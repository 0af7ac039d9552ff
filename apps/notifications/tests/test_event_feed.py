"""Tests for the append-only booking event feed."""

from __future__ import annotations

import uuid
from datetime import date

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.domain.events import BookingApproved, BookingRequested
from apps.notifications.models import AppendOnlyError, BookingEvent
from apps.notifications.services import DjangoEventStore
from shared.domain.value_objects import DateRange, Money

DATES = DateRange(date(2030, 1, 10), date(2030, 1, 12))


def refs(booking_id=None, listing_id=None) -> dict:
    return {
        "booking_id": booking_id or uuid.uuid4(),
        "listing_id": listing_id or uuid.uuid4(),
        "renter_id": uuid.uuid4(),
        "owner_id": uuid.uuid4(),
    }


class EventStoreTests(TestCase):
    def test_append_keeps_raise_order(self) -> None:
        ids = refs()
        rows = DjangoEventStore().append(
            [
                BookingRequested(**ids, dates=DATES, total_price=Money(16050)),
                BookingApproved(**ids, dates=DATES),
            ]
        )

        self.assertLess(rows[0].sequence, rows[1].sequence)
        stored = BookingEvent.objects.get(sequence=rows[0].sequence)
        self.assertEqual(stored.event_type, "BookingRequested")
        self.assertEqual(stored.payload["start_date"], "2030-01-10")
        self.assertEqual(stored.payload["total_price"], 16050)

    def test_rows_cannot_be_changed_or_removed(self) -> None:
        row = DjangoEventStore().append([BookingApproved(**refs(), dates=DATES)])[0]

        row.event_type = "Tampered"
        with self.assertRaises(AppendOnlyError):
            row.save()
        with self.assertRaises(AppendOnlyError):
            row.delete()
        with self.assertRaises(AppendOnlyError):
            BookingEvent.objects.filter(sequence=row.sequence).update(event_type="Tampered")
        with self.assertRaises(AppendOnlyError):
            BookingEvent.objects.all().delete()

        self.assertEqual(BookingEvent.objects.get(sequence=row.sequence).event_type, "BookingApproved")


class EventFeedAPITests(APITestCase):
    def test_feed_filters_by_booking_in_sequence_order(self) -> None:
        ids = refs()
        store = DjangoEventStore()
        store.append([BookingRequested(**ids, dates=DATES, total_price=Money(16050))])
        store.append([BookingApproved(**refs(listing_id=ids["listing_id"]), dates=DATES)])
        store.append([BookingApproved(**ids, dates=DATES)])

        response = self.client.get(reverse("booking-event-feed"), {"booking_id": str(ids["booking_id"])})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        results = response.data["results"]
        self.assertEqual([item["event_type"] for item in results], ["BookingRequested", "BookingApproved"])

        by_listing = self.client.get(reverse("booking-event-feed"), {"listing_id": str(ids["listing_id"])})
        self.assertEqual(by_listing.data["count"], 3)

    def test_after_resumes_from_sequence(self) -> None:
        rows = DjangoEventStore().append([BookingApproved(**refs(), dates=DATES) for _ in range(3)])

        response = self.client.get(reverse("booking-event-feed"), {"after": rows[0].sequence})

        self.assertEqual([item["sequence"] for item in response.data["results"]], [r.sequence for r in rows[1:]])
