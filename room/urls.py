from django.urls import path
from rest_framework.routers import DefaultRouter

from room.views import HotelSettingsView, RoomTypeViewSet, RoomViewSet

app_name = "room"

router = DefaultRouter()
router.register("room-types", RoomTypeViewSet, basename="room-types")
router.register("rooms", RoomViewSet, basename="rooms")

urlpatterns = [
    path("hotel-settings/", HotelSettingsView.as_view(), name="hotel-settings"),
] + router.urls
