import secrets
import string

from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from guest.models import Guest
from room.models import Room, RoomType

ID_ALPHABET = string.ascii_uppercase + string.digits


def generate_reservation_id() -> str:
    suffix = "".join(secrets.choice(ID_ALPHABET) for _ in range(4))
    return f"RES-{timezone.localdate():%y%m%d}-{suffix}"


class ReservationQuerySet(models.QuerySet):
    def occupying(self):
        """Reservations that still hold room inventory."""
        return self.exclude(
            status__in=(
                Reservation.Status.CANCELLED,
                Reservation.Status.CHECKED_OUT,
            )
        )

    def open_for_guest(self, guest_id):
        return self.filter(
            guest_id=guest_id,
            status__in=(
                Reservation.Status.CONFIRMED,
                Reservation.Status.CHECKED_IN,
            ),
        )


class Reservation(models.Model):
    class Status(models.TextChoices):
        CONFIRMED = "confirmed"
        CHECKED_IN = "checked-in"
        CHECKED_OUT = "checked-out"
        CANCELLED = "cancelled"

    id = models.CharField(
        primary_key=True, max_length=32, default=generate_reservation_id, editable=False
    )
    guest = models.ForeignKey(
        Guest, on_delete=models.CASCADE, related_name="reservations"
    )
    check_in_date = models.DateField()
    check_out_date = models.DateField()
    room_type = models.ForeignKey(
        RoomType, on_delete=models.PROTECT, related_name="reservations"
    )
    specific_room = models.ForeignKey(
        Room,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reservations",
    )
    number_of_guests = models.PositiveIntegerField(default=1)
    total_amount = models.DecimalField(max_digits=10, decimal_places=2)
    status = models.CharField(
        choices=Status, max_length=20, default=Status.CONFIRMED
    )
    special_requests = models.TextField(blank=True)
    reminder_sent = models.BooleanField(default=False)
    reminder_date = models.DateTimeField(null=True, blank=True)
    cancellation_comment = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = ReservationQuerySet.as_manager()

    class Meta:
        ordering = ("-check_in_date", "id")
        constraints = [
            models.CheckConstraint(
                condition=Q(check_out_date__gt=F("check_in_date")),
                name="reservation_check_out_after_check_in",
            ),
        ]
        indexes = [
            models.Index(
                fields=("check_in_date", "check_out_date"), name="reservation_dates_idx"
            ),
            models.Index(fields=("status",), name="reservation_status_idx"),
        ]

    def __str__(self):
        return f"{self.id} ({self.check_in_date} - {self.check_out_date})"

    @property
    def nights(self) -> int:
        return (self.check_out_date - self.check_in_date).days
