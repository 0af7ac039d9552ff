"""Admin registration for listings."""

from __future__ import annotations

from django.contrib import admin

from .models import Listing, UnavailableDate


@admin.register(Listing)
class ListingAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "owner_id", "price_per_day", "currency", "is_active")
    list_filter = ("is_active", "currency")
    search_fields = ("title", "owner_id")


@admin.register(UnavailableDate)
class UnavailableDateAdmin(admin.ModelAdmin):
    list_display = ("listing", "day", "source", "booking_id", "created_at")
    list_filter = ("source",)
    search_fields = ("listing__title", "booking_id")
    readonly_fields = ("listing", "day", "source", "booking_id", "created_at")
