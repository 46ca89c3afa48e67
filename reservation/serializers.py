from datetime import timedelta

from django.utils import timezone
from rest_framework import serializers

from reservation.exceptions import CapacityConflict
from reservation.models import Reservation
from reservation.services.availability import (
    find_overbooked_nights,
    next_feasible_start,
    partition_overlapping,
)
from reservation.services.clock import local_now
from reservation.services.state_machine import (
    is_no_show_risk,
    is_overdue_checkout,
    needs_reminder,
)
from room.models import HotelSettings, Room, RoomType
from room.serializers import RoomSerializer


def load_type_reservations(room_type_id, since=None, exclude_reservation_id=None):
    """Occupying reservations of one type, optionally only those ending after ``since``."""
    queryset = Reservation.objects.occupying().filter(room_type_id=room_type_id)
    if since is not None:
        queryset = queryset.filter(check_out_date__gte=since)
    if exclude_reservation_id:
        queryset = queryset.exclude(pk=exclude_reservation_id)
    return list(queryset)


class ReservationReadSerializer(serializers.ModelSerializer):
    guest_name = serializers.CharField(source="guest.full_name", read_only=True)
    guest_email = serializers.EmailField(source="guest.email", read_only=True)
    room_type_name = serializers.SerializerMethodField()
    specific_room_number = serializers.SerializerMethodField()
    nights = serializers.IntegerField(read_only=True)
    overdue_checkout = serializers.SerializerMethodField()
    reminder_pending = serializers.SerializerMethodField()
    no_show_risk = serializers.SerializerMethodField()

    class Meta:
        model = Reservation
        fields = (
            "id",
            "guest",
            "guest_name",
            "guest_email",
            "check_in_date",
            "check_out_date",
            "nights",
            "room_type",
            "room_type_name",
            "specific_room",
            "specific_room_number",
            "number_of_guests",
            "total_amount",
            "status",
            "special_requests",
            "reminder_sent",
            "reminder_date",
            "cancellation_comment",
            "created_at",
            "overdue_checkout",
            "reminder_pending",
            "no_show_risk",
        )
        read_only_fields = fields

    def _policy(self):
        if "policy" not in self.context:
            self.context["policy"] = HotelSettings.load().to_policy()
        return self.context["policy"]

    def _now(self):
        if "now" not in self.context:
            self.context["now"] = local_now()
        return self.context["now"]

    def _catalog(self, model):
        key = f"{model._meta.model_name}_catalog"
        if key not in self.context:
            self.context[key] = model.objects.in_bulk()
        return self.context[key]

    def get_room_type_name(self, obj):
        room_type = self._catalog(RoomType).get(obj.room_type_id)
        return room_type.name if room_type else str(obj.room_type_id)

    def get_specific_room_number(self, obj):
        if obj.specific_room_id is None:
            return None
        room = self._catalog(Room).get(obj.specific_room_id)
        return room.number if room else str(obj.specific_room_id)

    def get_overdue_checkout(self, obj):
        return is_overdue_checkout(obj, self._policy(), self._now())

    def get_reminder_pending(self, obj):
        return needs_reminder(obj, self._now().date())

    def get_no_show_risk(self, obj):
        return is_no_show_risk(obj, self._now())


class ReservationWriteSerializer(serializers.ModelSerializer):
    """Creates and edits reservations, admitting them only when rooms are free."""

    total_amount = serializers.DecimalField(
        max_digits=10, decimal_places=2, required=False, min_value=0
    )
    number_of_guests = serializers.IntegerField(min_value=1, default=1)

    class Meta:
        model = Reservation
        fields = (
            "guest",
            "check_in_date",
            "check_out_date",
            "room_type",
            "specific_room",
            "number_of_guests",
            "total_amount",
            "special_requests",
        )

    def validate_check_in_date(self, value):
        if value >= timezone.localdate():
            return value
        instance = self.instance
        if instance is not None and (
            value == instance.check_in_date
            or instance.status == Reservation.Status.CHECKED_IN
        ):
            return value
        raise serializers.ValidationError("Check-in date cannot be in the past.")

    def validate(self, attrs):
        instance = self.instance
        if instance is not None and instance.status not in (
            Reservation.Status.CONFIRMED,
            Reservation.Status.CHECKED_IN,
        ):
            raise serializers.ValidationError(
                f"A {instance.status} reservation cannot be edited."
            )

        def current(field):
            if field in attrs:
                return attrs[field]
            return getattr(instance, field, None)

        check_in = current("check_in_date")
        check_out = current("check_out_date")
        room_type = current("room_type")
        specific_room = current("specific_room")

        if check_out <= check_in:
            raise serializers.ValidationError(
                "Check-out date must be after check-in date."
            )

        if specific_room is not None and (
            specific_room.room_type_id != room_type.pk or not specific_room.is_active
        ):
            raise serializers.ValidationError(
                {"specific_room": f"Room {specific_room.number} is not an active {room_type.name} room."}
            )

        exclude_id = instance.pk if instance is not None else None
        policy = HotelSettings.load().to_policy()
        existing = load_type_reservations(
            room_type.pk, since=check_in - timedelta(days=1), exclude_reservation_id=exclude_id
        )
        candidate = Reservation(
            id=exclude_id,
            room_type=room_type,
            check_in_date=check_in,
            check_out_date=check_out,
        )

        overbooked = find_overbooked_nights(candidate, existing, policy)
        if overbooked:
            duration = (check_out - check_in).days
            raise CapacityConflict(
                room_type.name,
                overbooked,
                duration,
                next_feasible_start(
                    room_type.pk, duration, check_in, existing, policy, exclude_id
                ),
            )

        if specific_room is not None:
            pinned, _ = partition_overlapping(
                room_type.pk, check_in, check_out, existing, policy, exclude_id
            )
            if specific_room.pk in pinned:
                raise serializers.ValidationError(
                    {"specific_room": f"Room {specific_room.number} is already booked for these dates."}
                )

        if "total_amount" not in attrs and (
            instance is None
            or {"check_in_date", "check_out_date", "room_type"} & attrs.keys()
        ):
            attrs["total_amount"] = room_type.base_price * (check_out - check_in).days

        return attrs

    def create(self, validated_data):
        return Reservation.objects.create(
            status=Reservation.Status.CONFIRMED, **validated_data
        )


class ReservationCancelSerializer(serializers.Serializer):
    comment = serializers.CharField(required=False, allow_blank=True)


class ReservationCheckInSerializer(serializers.Serializer):
    room = serializers.PrimaryKeyRelatedField(
        queryset=Room.objects.active(), required=False
    )


class AvailabilityQuerySerializer(serializers.Serializer):
    room_type = serializers.PrimaryKeyRelatedField(queryset=RoomType.objects.all())
    check_in_date = serializers.DateField()
    check_out_date = serializers.DateField()
    exclude = serializers.CharField(required=False)
    guest = serializers.IntegerField(required=False)

    def validate(self, attrs):
        if attrs["check_out_date"] <= attrs["check_in_date"]:
            raise serializers.ValidationError(
                "Check-out date must be after check-in date."
            )
        return attrs


class AvailabilitySerializer(serializers.Serializer):
    room_type = serializers.IntegerField()
    check_in_date = serializers.DateField()
    check_out_date = serializers.DateField()
    nights = serializers.IntegerField()
    overbooked_nights = serializers.ListField(child=serializers.DateField())
    available_rooms = RoomSerializer(many=True)
    next_available_date = serializers.DateField(allow_null=True)
    open_reservations = serializers.ListField(child=serializers.CharField())


class AlertsSerializer(serializers.Serializer):
    overdue_checkouts = ReservationReadSerializer(many=True)
    pending_reminders = ReservationReadSerializer(many=True)
    no_show_risk = ReservationReadSerializer(many=True)


class SummarySerializer(serializers.Serializer):
    total_reservations = serializers.IntegerField()
    total_guests = serializers.IntegerField()
    upcoming_reservations = serializers.IntegerField()
    checked_in = serializers.IntegerField()
    monthly_revenue = serializers.DecimalField(max_digits=12, decimal_places=2)
    overdue_checkouts = serializers.IntegerField()
    pending_reminders = serializers.IntegerField()
    no_show_risk = serializers.IntegerField()
