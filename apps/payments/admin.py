"""Admin registration for payment orders."""

from __future__ import annotations

from django.contrib import admin

from .models import PaymentOrder


@admin.register(PaymentOrder)
class PaymentOrderAdmin(admin.ModelAdmin):
    list_display = ("order_id", "booking", "amount", "currency", "status", "provider", "created_at", "captured_at")
    list_filter = ("status", "provider", "currency")
    search_fields = ("order_id", "transaction_id", "booking__id", "payer_email")
    readonly_fields = (
        "order_id",
        "booking",
        "amount",
        "currency",
        "platform_fee",
        "provider",
        "transaction_id",
        "payer_id",
        "payer_email",
        "created_at",
        "captured_at",
        "failed_at",
    )
