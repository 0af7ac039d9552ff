import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="BookingEvent",
            fields=[
                ("sequence", models.BigAutoField(primary_key=True, serialize=False)),
                ("event_id", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("event_type", models.CharField(db_index=True, max_length=64)),
                ("booking_id", models.UUIDField()),
                ("listing_id", models.UUIDField()),
                ("renter_id", models.UUIDField()),
                ("owner_id", models.UUIDField()),
                ("occurred_at", models.DateTimeField()),
                ("payload", models.JSONField(blank=True, default=dict)),
                ("recorded_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name": "Booking event",
                "verbose_name_plural": "Booking events",
                "ordering": ["sequence"],
                "indexes": [
                    models.Index(fields=["booking_id", "sequence"], name="booking_event_booking_seq"),
                    models.Index(fields=["listing_id", "sequence"], name="booking_event_listing_seq"),
                ],
            },
        ),
    ]
