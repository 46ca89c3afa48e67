import django.db.models.deletion
from django.db import migrations, models

import reservation.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("guest", "0001_initial"),
        ("room", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Reservation",
            fields=[
                (
                    "id",
                    models.CharField(
                        default=reservation.models.generate_reservation_id,
                        editable=False,
                        max_length=32,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("check_in_date", models.DateField()),
                ("check_out_date", models.DateField()),
                ("number_of_guests", models.PositiveIntegerField(default=1)),
                ("total_amount", models.DecimalField(decimal_places=2, max_digits=10)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("confirmed", "Confirmed"),
                            ("checked-in", "Checked In"),
                            ("checked-out", "Checked Out"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="confirmed",
                        max_length=20,
                    ),
                ),
                ("special_requests", models.TextField(blank=True)),
                ("reminder_sent", models.BooleanField(default=False)),
                ("reminder_date", models.DateTimeField(blank=True, null=True)),
                ("cancellation_comment", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "guest",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="reservations",
                        to="guest.guest",
                    ),
                ),
                (
                    "room_type",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reservations",
                        to="room.roomtype",
                    ),
                ),
                (
                    "specific_room",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="reservations",
                        to="room.room",
                    ),
                ),
            ],
            options={
                "ordering": ("-check_in_date", "id"),
                "indexes": [
                    models.Index(
                        fields=["check_in_date", "check_out_date"],
                        name="reservation_dates_idx",
                    ),
                    models.Index(fields=["status"], name="reservation_status_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            ("check_out_date__gt", models.F("check_in_date"))
                        ),
                        name="reservation_check_out_after_check_in",
                    ),
                ],
            },
        ),
    ]
