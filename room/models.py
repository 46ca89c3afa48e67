from datetime import time

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models.functions import Length
from django.utils import timezone

from reservation.services.clock import HotelPolicy


class RoomType(models.Model):
    name = models.CharField(max_length=100, unique=True)
    base_price = models.DecimalField(max_digits=10, decimal_places=2)
    description = models.TextField(blank=True)

    class Meta:
        ordering = ("name",)

    def __str__(self):
        return self.name


class RoomQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)

    def in_number_order(self):
        # Shorter numbers first so "102" sorts before "1001".
        return self.order_by(Length("number"), "number")


class Room(models.Model):
    number = models.CharField(max_length=20, unique=True)
    room_type = models.ForeignKey(
        RoomType, on_delete=models.PROTECT, related_name="rooms"
    )
    is_active = models.BooleanField(default=True)
    amenities = models.JSONField(default=list, blank=True)

    objects = RoomQuerySet.as_manager()

    class Meta:
        ordering = ("number",)

    def __str__(self):
        return f"Room {self.number}"


class HotelSettings(models.Model):
    """Single-row hotel configuration consulted by every availability check."""

    hotel_name = models.CharField(max_length=255, default="Hotel")
    check_in_time = models.TimeField(default=time(15, 0))
    check_out_time = models.TimeField(default=time(11, 0))
    from_email = models.EmailField(blank=True)
    price_change_notifications = models.BooleanField(default=False)
    price_change_recipients = models.JSONField(default=list, blank=True)

    class Meta:
        verbose_name = "hotel settings"
        verbose_name_plural = "hotel settings"

    def __str__(self):
        return self.hotel_name

    def clean(self):
        if self.check_out_time > self.check_in_time:
            raise ValidationError(
                "Check-out time cannot be later than check-in time."
            )

    def save(self, *args, **kwargs):
        self.pk = 1
        super().save(*args, **kwargs)

    @classmethod
    def load(cls):
        settings, _ = cls.objects.get_or_create(pk=1)
        return settings

    def to_policy(self, rooms=None) -> HotelPolicy:
        if rooms is None:
            rooms = Room.objects.active().select_related("room_type").in_number_order()
        return HotelPolicy(
            check_in_time=self.check_in_time,
            check_out_time=self.check_out_time,
            rooms=tuple(rooms),
            tz=timezone.get_current_timezone(),
        )
