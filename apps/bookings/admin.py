"""Admin registration for bookings (read-only: transitions go through commands)."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "listing",
        "renter_id",
        "status",
        "start_date",
        "end_date",
        "total_price",
        "currency",
        "created_at",
    )
    list_filter = ("status", "start_date", "end_date")
    search_fields = ("id", "listing__title", "renter_id", "payment_order_id")

    def get_readonly_fields(self, request, obj=None):  # type: ignore
        return [field.name for field in self.model._meta.fields]

    def has_add_permission(self, request):  # type: ignore
        return False

    def has_delete_permission(self, request, obj=None):  # type: ignore
        return False
