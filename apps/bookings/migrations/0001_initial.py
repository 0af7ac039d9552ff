import uuid

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("listings", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("renter_id", models.UUIDField(db_index=True)),
                ("owner_id", models.UUIDField(help_text="Listing owner at request time.")),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("requested", "Requested"),
                            ("approved", "Approved"),
                            ("rejected", "Rejected"),
                            ("payment_pending", "Payment pending"),
                            ("confirmed", "Confirmed"),
                            ("cancelled", "Cancelled"),
                            ("completed", "Completed"),
                        ],
                        default="requested",
                        max_length=20,
                    ),
                ),
                ("message", models.TextField(blank=True)),
                (
                    "price_per_day",
                    models.PositiveIntegerField(help_text="Daily price in minor units at request time."),
                ),
                ("nights", models.PositiveSmallIntegerField()),
                ("renter_fee", models.PositiveIntegerField(default=0)),
                ("lister_fee", models.PositiveIntegerField(default=0)),
                ("lister_payout", models.PositiveIntegerField(default=0)),
                (
                    "total_price",
                    models.PositiveIntegerField(help_text="Amount charged to the renter, minor units."),
                ),
                ("currency", models.CharField(default="USD", max_length=3)),
                ("payment_order_id", models.CharField(blank=True, max_length=64, null=True)),
                ("payment_transaction_id", models.CharField(blank=True, max_length=64, null=True)),
                ("rejection_reason", models.CharField(blank=True, max_length=255)),
                ("cancellation_reason", models.CharField(blank=True, max_length=255)),
                ("cancelled_by", models.UUIDField(blank=True, null=True)),
                ("created_at", models.DateTimeField()),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("decided_at", models.DateTimeField(blank=True, null=True)),
                ("confirmed_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "listing",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to="listings.listing",
                    ),
                ),
            ],
            options={
                "verbose_name": "Booking",
                "verbose_name_plural": "Bookings",
                "ordering": ["-created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("end_date__gte", models.F("start_date"))),
                        name="booking_valid_dates",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("status", "confirmed"), _negated=True)
                        | models.Q(("payment_transaction_id__isnull", False)),
                        name="booking_confirmed_has_transaction",
                    ),
                ],
                "indexes": [
                    models.Index(fields=["listing", "start_date", "end_date"], name="booking_listing_dates"),
                    models.Index(fields=["status", "end_date"], name="booking_status_end_date"),
                ],
            },
        ),
    ]
