from datetime import timedelta

from django.db.models import ProtectedError
from django.utils.dateparse import parse_date
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import generics, status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.viewsets import ModelViewSet

from reservation.models import Reservation
from reservation.services.availability import room_calendar
from room.models import HotelSettings, Room, RoomType
from room.permissions import IsAdminOrReadOnly
from room.serializers import (
    HotelSettingsSerializer,
    RoomCalendarSerializer,
    RoomSerializer,
    RoomTypeSerializer,
)


class RoomTypeViewSet(ModelViewSet):
    queryset = RoomType.objects.all()
    serializer_class = RoomTypeSerializer
    permission_classes = (IsAdminOrReadOnly,)

    def destroy(self, request, *args, **kwargs):
        room_type = self.get_object()
        try:
            room_type.delete()
        except ProtectedError:
            return Response(
                {"detail": "Room type is still used by rooms or reservations."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return Response(status=status.HTTP_204_NO_CONTENT)


class RoomViewSet(ModelViewSet):
    queryset = Room.objects.select_related("room_type").in_number_order()
    serializer_class = RoomSerializer
    permission_classes = (IsAdminOrReadOnly,)

    filter_backends = (DjangoFilterBackend,)
    filterset_fields = ("room_type", "is_active")

    def get_serializer_class(self):
        if self.action == "get_calendar":
            return RoomCalendarSerializer
        return RoomSerializer

    @extend_schema(
        request=None,
        parameters=[
            OpenApiParameter(
                name="date_from",
                type=OpenApiTypes.DATE,
                location=OpenApiParameter.QUERY,
                description="First day (YYYY-MM-DD)",
                required=True,
            ),
            OpenApiParameter(
                name="date_to",
                type=OpenApiTypes.DATE,
                location=OpenApiParameter.QUERY,
                description="Last day, inclusive (YYYY-MM-DD)",
                required=True,
            ),
        ],
        responses={200: RoomCalendarSerializer(many=True)},
        description=(
            "Room availability calendar for a date range.\n\n"
            "A day is unavailable when a reservation pins this room or when "
            "generic reservations use up every free room of its type. "
            "Cancelled and checked-out reservations are ignored."
        ),
    )
    @action(methods=["GET"], detail=True, url_path="calendar", filter_backends=[])
    def get_calendar(self, request, pk=None):
        room = self.get_object()

        date_from_str = request.query_params.get("date_from")
        date_to_str = request.query_params.get("date_to")

        if not date_from_str or not date_to_str:
            return Response(
                {"detail": "date_from and date_to are required"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        date_from = parse_date(date_from_str)
        date_to = parse_date(date_to_str)

        if not date_from or not date_to:
            return Response(
                {"detail": "Invalid date format. Use YYYY-MM-DD."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        if date_from > date_to:
            return Response(
                {"detail": "date_from must be before date_to"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        reservations = Reservation.objects.occupying().filter(
            room_type_id=room.room_type_id,
            check_in_date__lte=date_to + timedelta(days=1),
            check_out_date__gte=date_from,
        )
        policy = HotelSettings.load().to_policy()
        calendar = room_calendar(room, date_from, date_to, list(reservations), policy)

        serializer = RoomCalendarSerializer(calendar, many=True)
        return Response(serializer.data)


class HotelSettingsView(generics.RetrieveUpdateAPIView):
    serializer_class = HotelSettingsSerializer
    permission_classes = (IsAdminOrReadOnly,)

    def get_object(self):
        return HotelSettings.load()
