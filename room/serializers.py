from django.db import transaction
from rest_framework import serializers

from notifications.tasks import send_price_change_notification
from room.models import HotelSettings, Room, RoomType


class RoomTypeSerializer(serializers.ModelSerializer):
    class Meta:
        model = RoomType
        fields = ("id", "name", "base_price", "description")

    def update(self, instance, validated_data):
        old_price = instance.base_price
        room_type = super().update(instance, validated_data)
        if room_type.base_price != old_price:
            new_price = room_type.base_price
            transaction.on_commit(
                lambda: send_price_change_notification.delay(
                    room_type.pk, str(old_price), str(new_price)
                )
            )
        return room_type


class RoomSerializer(serializers.ModelSerializer):
    room_type_name = serializers.CharField(source="room_type.name", read_only=True)

    class Meta:
        model = Room
        fields = ("id", "number", "room_type", "room_type_name", "is_active", "amenities")

    def validate_amenities(self, value):
        if not all(isinstance(item, str) for item in value):
            raise serializers.ValidationError("Amenities must be a list of strings.")
        return value


class RoomCalendarSerializer(serializers.Serializer):
    date = serializers.DateField()
    available = serializers.BooleanField()


class HotelSettingsSerializer(serializers.ModelSerializer):
    check_in_time = serializers.TimeField(format="%H:%M")
    check_out_time = serializers.TimeField(format="%H:%M")
    price_change_recipients = serializers.ListField(
        child=serializers.EmailField(), required=False
    )

    class Meta:
        model = HotelSettings
        fields = (
            "hotel_name",
            "check_in_time",
            "check_out_time",
            "from_email",
            "price_change_notifications",
            "price_change_recipients",
        )

    def validate(self, attrs):
        check_in_time = attrs.get(
            "check_in_time", getattr(self.instance, "check_in_time", None)
        )
        check_out_time = attrs.get(
            "check_out_time", getattr(self.instance, "check_out_time", None)
        )
        if check_in_time and check_out_time and check_out_time > check_in_time:
            raise serializers.ValidationError(
                "Check-out time cannot be later than check-in time."
            )
        return attrs
