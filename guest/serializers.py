from rest_framework import serializers

from guest.models import Guest


class AddressSerializer(serializers.Serializer):
    street = serializers.CharField(allow_blank=True, required=False)
    city = serializers.CharField(allow_blank=True, required=False)
    state = serializers.CharField(allow_blank=True, required=False)
    zip_code = serializers.CharField(allow_blank=True, required=False)


class GuestSerializer(serializers.ModelSerializer):
    address = AddressSerializer(source="*", required=False)
    open_reservations = serializers.SerializerMethodField()

    class Meta:
        model = Guest
        fields = (
            "id",
            "first_name",
            "last_name",
            "email",
            "phone",
            "address",
            "number_of_kids",
            "comments",
            "created_at",
            "open_reservations",
        )
        read_only_fields = ("created_at",)

    def get_open_reservations(self, obj):
        return list(
            obj.reservations.open_for_guest(obj.id).values_list("id", flat=True)
        )
