"""Payment orders created against the external payment provider."""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class PaymentOrder(models.Model):
    """One provider order for a booking; retries after a failure get a new row."""

    class Status(models.TextChoices):
        CREATED = "created", _("Created")
        CAPTURED = "captured", _("Captured")
        FAILED = "failed", _("Failed")

    order_id = models.CharField(max_length=64, primary_key=True)
    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.PROTECT,
        related_name="payment_orders",
    )
    amount = models.PositiveIntegerField(help_text=_("Amount in minor currency units."))
    currency = models.CharField(max_length=3, default="USD")
    platform_fee = models.PositiveIntegerField(default=0)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.CREATED)
    provider = models.CharField(max_length=32, default="paypal")
    transaction_id = models.CharField(max_length=64, blank=True)
    payer_id = models.CharField(max_length=64, blank=True)
    payer_email = models.CharField(max_length=254, blank=True)
    failure_reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    captured_at = models.DateTimeField(null=True, blank=True)
    failed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = _("Payment order")
        verbose_name_plural = _("Payment orders")
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["booking"],
                condition=models.Q(status="captured"),
                name="payment_order_single_capture_per_booking",
            ),
        ]
        indexes = [
            models.Index(fields=["booking", "status"], name="payment_order_booking_status"),
        ]

    def __str__(self) -> str:
        return f"Order {self.order_id} ({self.status})"
