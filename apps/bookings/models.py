"""Booking persistence model."""

from __future__ import annotations

import uuid

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Booking(models.Model):
    """Stored state of a booking; mutated only through the command handlers."""

    class Status(models.TextChoices):
        REQUESTED = "requested", _("Requested")
        APPROVED = "approved", _("Approved")
        REJECTED = "rejected", _("Rejected")
        PAYMENT_PENDING = "payment_pending", _("Payment pending")
        CONFIRMED = "confirmed", _("Confirmed")
        CANCELLED = "cancelled", _("Cancelled")
        COMPLETED = "completed", _("Completed")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    listing = models.ForeignKey(
        "listings.Listing",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    renter_id = models.UUIDField(db_index=True)
    owner_id = models.UUIDField(help_text=_("Listing owner at request time."))
    start_date = models.DateField()
    end_date = models.DateField()
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.REQUESTED)
    message = models.TextField(blank=True)

    price_per_day = models.PositiveIntegerField(help_text=_("Daily price in minor units at request time."))
    nights = models.PositiveSmallIntegerField()
    renter_fee = models.PositiveIntegerField(default=0)
    lister_fee = models.PositiveIntegerField(default=0)
    lister_payout = models.PositiveIntegerField(default=0)
    total_price = models.PositiveIntegerField(help_text=_("Amount charged to the renter, minor units."))
    currency = models.CharField(max_length=3, default="USD")

    payment_order_id = models.CharField(max_length=64, null=True, blank=True)
    payment_transaction_id = models.CharField(max_length=64, null=True, blank=True)

    rejection_reason = models.CharField(max_length=255, blank=True)
    cancellation_reason = models.CharField(max_length=255, blank=True)
    cancelled_by = models.UUIDField(null=True, blank=True)

    created_at = models.DateTimeField()
    updated_at = models.DateTimeField(auto_now=True)
    decided_at = models.DateTimeField(null=True, blank=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gte=models.F("start_date")),
                name="booking_valid_dates",
            ),
            models.CheckConstraint(
                condition=~models.Q(status="confirmed") | models.Q(payment_transaction_id__isnull=False),
                name="booking_confirmed_has_transaction",
            ),
        ]
        indexes = [
            models.Index(fields=["listing", "start_date", "end_date"], name="booking_listing_dates"),
            models.Index(fields=["status", "end_date"], name="booking_status_end_date"),
        ]

    def __str__(self) -> str:
        return f"Booking {self.id} for {self.listing_id} ({self.status})"
