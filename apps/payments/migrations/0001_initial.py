from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("bookings", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="PaymentOrder",
            fields=[
                ("order_id", models.CharField(max_length=64, primary_key=True, serialize=False)),
                ("amount", models.PositiveIntegerField(help_text="Amount in minor currency units.")),
                ("currency", models.CharField(default="USD", max_length=3)),
                ("platform_fee", models.PositiveIntegerField(default=0)),
                (
                    "status",
                    models.CharField(
                        choices=[("created", "Created"), ("captured", "Captured"), ("failed", "Failed")],
                        default="created",
                        max_length=20,
                    ),
                ),
                ("provider", models.CharField(default="paypal", max_length=32)),
                ("transaction_id", models.CharField(blank=True, max_length=64)),
                ("payer_id", models.CharField(blank=True, max_length=64)),
                ("payer_email", models.CharField(blank=True, max_length=254)),
                ("failure_reason", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("captured_at", models.DateTimeField(blank=True, null=True)),
                ("failed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payment_orders",
                        to="bookings.booking",
                    ),
                ),
            ],
            options={
                "verbose_name": "Payment order",
                "verbose_name_plural": "Payment orders",
                "ordering": ["created_at"],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("status", "captured")),
                        fields=("booking",),
                        name="payment_order_single_capture_per_booking",
                    ),
                ],
                "indexes": [
                    models.Index(fields=["booking", "status"], name="payment_order_booking_status"),
                ],
            },
        ),
    ]
