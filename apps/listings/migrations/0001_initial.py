import uuid

from django.db import migrations, models
import django.db.models.deletion

import apps.listings.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Listing",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("owner_id", models.UUIDField(db_index=True)),
                ("title", models.CharField(blank=True, max_length=200)),
                (
                    "price_per_day",
                    models.PositiveIntegerField(help_text="Daily price in minor currency units (cents)."),
                ),
                ("currency", models.CharField(default=apps.listings.models.default_currency, max_length=3)),
                ("is_active", models.BooleanField(default=True)),
                (
                    "payee_merchant_id",
                    models.CharField(
                        blank=True,
                        help_text="Payment provider merchant id of the owner.",
                        max_length=64,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name": "Listing",
                "verbose_name_plural": "Listings",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="UnavailableDate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("day", models.DateField()),
                ("booking_id", models.UUIDField(blank=True, db_index=True, null=True)),
                (
                    "source",
                    models.CharField(
                        choices=[("booking", "Held by a booking"), ("manual", "Blocked by the owner")],
                        default="manual",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "listing",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="unavailable_dates",
                        to="listings.listing",
                    ),
                ),
            ],
            options={
                "verbose_name": "Unavailable date",
                "verbose_name_plural": "Unavailable dates",
                "ordering": ["day"],
                "constraints": [
                    models.UniqueConstraint(fields=("listing", "day"), name="unavailable_date_unique_day"),
                    models.CheckConstraint(
                        condition=models.Q(("source", "manual"), ("booking_id__isnull", True))
                        | models.Q(("source", "booking"), ("booking_id__isnull", False)),
                        name="unavailable_date_source_matches_booking",
                    ),
                ],
            },
        ),
    ]
