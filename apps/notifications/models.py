"""Booking event feed model.

Each row is one lifecycle event written in the same transaction as the
booking transition that raised it. Rows are never changed or removed:
external dispatchers read the feed by ascending sequence.
"""

from __future__ import annotations

import uuid

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class AppendOnlyError(Exception):
    """Raised on any attempt to change or remove a feed row."""


class BookingEventQuerySet(models.QuerySet):
    def update(self, **kwargs):  # type: ignore
        raise AppendOnlyError("Booking events cannot be updated")

    def delete(self):  # type: ignore
        raise AppendOnlyError("Booking events cannot be deleted")


class BookingEvent(models.Model):
    """A committed booking lifecycle event."""

    sequence = models.BigAutoField(primary_key=True)
    event_id = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    event_type = models.CharField(max_length=64, db_index=True)
    booking_id = models.UUIDField()
    listing_id = models.UUIDField()
    renter_id = models.UUIDField()
    owner_id = models.UUIDField()
    occurred_at = models.DateTimeField()
    payload = models.JSONField(default=dict, blank=True)
    recorded_at = models.DateTimeField(auto_now_add=True)

    objects = BookingEventQuerySet.as_manager()

    class Meta:
        verbose_name = _("Booking event")
        verbose_name_plural = _("Booking events")
        ordering = ["sequence"]
        indexes = [
            models.Index(fields=["booking_id", "sequence"], name="booking_event_booking_seq"),
            models.Index(fields=["listing_id", "sequence"], name="booking_event_listing_seq"),
        ]

    def save(self, *args, **kwargs):  # type: ignore
        if not self._state.adding:
            raise AppendOnlyError(f"Booking event {self.sequence} cannot be updated")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):  # type: ignore
        raise AppendOnlyError(f"Booking event {self.sequence} cannot be deleted")

    def __str__(self) -> str:
        return f"#{self.sequence} {self.event_type} ({self.booking_id})"
