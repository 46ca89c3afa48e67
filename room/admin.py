from django.contrib import admin

from room.models import HotelSettings, Room, RoomType


@admin.register(RoomType)
class RoomTypeAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "base_price")
    search_fields = ("name",)


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ("id", "number", "room_type", "is_active")
    search_fields = ("number",)
    list_filter = ("room_type", "is_active")


@admin.register(HotelSettings)
class HotelSettingsAdmin(admin.ModelAdmin):
    list_display = (
        "hotel_name",
        "check_in_time",
        "check_out_time",
        "price_change_notifications",
    )

    def has_add_permission(self, request):
        return not HotelSettings.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False
