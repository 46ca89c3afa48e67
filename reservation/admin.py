from django.contrib import admin

from reservation.models import Reservation


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "guest",
        "room_type",
        "specific_room",
        "check_in_date",
        "check_out_date",
        "status",
        "total_amount",
        "reminder_sent",
    )

    list_filter = (
        "status",
        "room_type",
        "check_in_date",
        "check_out_date",
        "reminder_sent",
    )

    search_fields = (
        "id",
        "guest__email",
        "guest__last_name",
        "specific_room__number",
    )

    readonly_fields = ("status", "cancellation_comment", "created_at")

    ordering = ("-check_in_date",)
