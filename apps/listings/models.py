"""Listing reference data and the availability calendar."""

from __future__ import annotations

import uuid

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


def default_currency() -> str:
    return settings.BOOKING_CURRENCY


class Listing(models.Model):
    """Rentable item as seen by the booking core (read-only reference)."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner_id = models.UUIDField(db_index=True)
    title = models.CharField(max_length=200, blank=True)
    price_per_day = models.PositiveIntegerField(
        help_text=_("Daily price in minor currency units (cents)."),
    )
    currency = models.CharField(max_length=3, default=default_currency)
    is_active = models.BooleanField(default=True)
    payee_merchant_id = models.CharField(
        max_length=64,
        blank=True,
        help_text=_("Payment provider merchant id of the owner."),
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Listing")
        verbose_name_plural = _("Listings")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.title or str(self.id)


class UnavailableDate(models.Model):
    """One blocked calendar day of a listing."""

    class Source(models.TextChoices):
        BOOKING = "booking", _("Held by a booking")
        MANUAL = "manual", _("Blocked by the owner")

    listing = models.ForeignKey(
        Listing,
        on_delete=models.CASCADE,
        related_name="unavailable_dates",
    )
    day = models.DateField()
    booking_id = models.UUIDField(null=True, blank=True, db_index=True)
    source = models.CharField(max_length=20, choices=Source.choices, default=Source.MANUAL)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Unavailable date")
        verbose_name_plural = _("Unavailable dates")
        ordering = ["day"]
        constraints = [
            models.UniqueConstraint(fields=["listing", "day"], name="unavailable_date_unique_day"),
            models.CheckConstraint(
                condition=models.Q(source="manual", booking_id__isnull=True)
                | models.Q(source="booking", booking_id__isnull=False),
                name="unavailable_date_source_matches_booking",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.listing_id}: {self.day.isoformat()} ({self.source})"
