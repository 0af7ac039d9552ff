"""Admin registration for the booking event feed (read-only)."""

from __future__ import annotations

from django.contrib import admin

from .models import BookingEvent


@admin.register(BookingEvent)
class BookingEventAdmin(admin.ModelAdmin):
    list_display = ("sequence", "event_type", "booking_id", "listing_id", "occurred_at")
    list_filter = ("event_type",)
    search_fields = ("booking_id", "listing_id")

    def has_add_permission(self, request):  # type: ignore
        return False

    def has_change_permission(self, request, obj=None):  # type: ignore
        return False

    def has_delete_permission(self, request, obj=None):  # type: ignore
        return False
