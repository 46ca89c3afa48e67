import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    OpenApiTypes,
    extend_schema,
)
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from guest.models import Guest
from notifications.services.email import CANCELLATION, REMINDER, EmailNotifier
from reservation.exceptions import CapacityConflict, InvalidTransition
from reservation.filters import ReservationFilter
from reservation.models import Reservation
from reservation.serializers import (
    AlertsSerializer,
    AvailabilityQuerySerializer,
    AvailabilitySerializer,
    ReservationCancelSerializer,
    ReservationCheckInSerializer,
    ReservationReadSerializer,
    ReservationWriteSerializer,
    SummarySerializer,
    load_type_reservations,
)
from reservation.services import state_machine
from reservation.services.availability import (
    available_rooms,
    find_overbooked_nights,
    next_feasible_start,
)
from reservation.services.clock import local_now
from room.models import HotelSettings

logger = logging.getLogger(__name__)


class ReservationViewSet(
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    mixins.ListModelMixin,
    viewsets.GenericViewSet,
):
    queryset = Reservation.objects.select_related("guest", "room_type", "specific_room")
    serializer_class = ReservationReadSerializer
    permission_classes = (IsAuthenticated,)
    filter_backends = (DjangoFilterBackend,)
    filterset_class = ReservationFilter

    def get_serializer_class(self):
        if self.action in ("create", "update", "partial_update"):
            return ReservationWriteSerializer
        return ReservationReadSerializer

    def _read(self, reservation, status_code=status.HTTP_200_OK):
        serializer = ReservationReadSerializer(
            reservation, context=self.get_serializer_context()
        )
        return Response(serializer.data, status=status_code)

    def create(self, request, *args, **kwargs):
        """Book a stay after checking every night against the room type's inventory."""
        serializer = self.get_serializer(data=request.data)
        try:
            serializer.is_valid(raise_exception=True)
        except CapacityConflict as conflict:
            return Response(conflict.as_dict(), status=status.HTTP_400_BAD_REQUEST)
        reservation = serializer.save()
        logger.info(f"Created reservation {reservation.id}")
        return self._read(reservation, status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        reservation = self.get_object()
        serializer = self.get_serializer(reservation, data=request.data, partial=partial)
        try:
            serializer.is_valid(raise_exception=True)
        except CapacityConflict as conflict:
            return Response(conflict.as_dict(), status=status.HTTP_400_BAD_REQUEST)
        reservation = serializer.save()
        return self._read(reservation)

    def _transition(self, reservation, apply, *args):
        try:
            update_fields = apply(reservation, *args)
        except InvalidTransition as exc:
            return None, Response(
                {"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST
            )
        return update_fields, None

    @extend_schema(request=ReservationCheckInSerializer)
    @action(detail=True, methods=["post"], url_path="check-in")
    def check_in(self, request, pk=None):
        """Check the guest in; a generic reservation is given a room here."""
        reservation = self.get_object()
        serializer = ReservationCheckInSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        today = timezone.localdate()

        if today < reservation.check_in_date:
            return Response(
                {"detail": "Too early to check in."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        if today >= reservation.check_out_date:
            return Response(
                {"detail": "Check-in is not possible after check-out date."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        update_fields, error = self._transition(reservation, state_machine.check_in)
        if error:
            return error

        requested_room = serializer.validated_data.get("room")
        if requested_room is not None or reservation.specific_room_id is None:
            policy = HotelSettings.load().to_policy()
            free_rooms = available_rooms(
                reservation.room_type_id,
                today,
                reservation.check_out_date,
                load_type_reservations(reservation.room_type_id, since=today),
                policy,
                exclude_reservation_id=reservation.pk,
            )
            if requested_room is not None:
                if requested_room not in free_rooms:
                    return Response(
                        {"room": f"Room {requested_room.number} is not free for this stay."},
                        status=status.HTTP_400_BAD_REQUEST,
                    )
                reservation.specific_room = requested_room
                update_fields.append("specific_room")
            elif free_rooms:
                reservation.specific_room = free_rooms[0]
                update_fields.append("specific_room")
            else:
                logger.warning(
                    f"No free room to assign at check-in for reservation {reservation.pk}"
                )

        reservation.save(update_fields=update_fields)
        return self._read(reservation)

    @extend_schema(request=None)
    @action(detail=True, methods=["post"], url_path="check-out")
    def check_out(self, request, pk=None):
        reservation = self.get_object()

        update_fields, error = self._transition(reservation, state_machine.check_out)
        if error:
            return error

        reservation.save(update_fields=update_fields)
        return self._read(reservation)

    @extend_schema(request=ReservationCancelSerializer)
    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        reservation = self.get_object()
        serializer = ReservationCancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        update_fields, error = self._transition(
            reservation,
            state_machine.cancel,
            serializer.validated_data.get("comment"),
        )
        if error:
            return error

        with transaction.atomic():
            reservation.save(update_fields=update_fields)
        return self._read(reservation)

    @extend_schema(
        request=None,
        responses={
            200: ReservationReadSerializer,
            502: OpenApiResponse(description="The email could not be delivered"),
        },
        description=(
            "Email the guest now. Cancelled reservations get a cancellation "
            "confirmation, all others a stay reminder. A delivered reminder "
            "is recorded on the reservation."
        ),
    )
    @action(detail=True, methods=["post"], url_path="send-reminder")
    def send_reminder(self, request, pk=None):
        reservation = self.get_object()
        kind = (
            CANCELLATION
            if reservation.status == Reservation.Status.CANCELLED
            else REMINDER
        )

        result = EmailNotifier(HotelSettings.load()).send(
            kind, reservation, reservation.guest
        )
        if not result.success:
            return Response(
                {"detail": f"Failed to send email: {result.error}"},
                status=status.HTTP_502_BAD_GATEWAY,
            )

        if kind == REMINDER:
            reservation.reminder_sent = True
            reservation.reminder_date = timezone.now()
            reservation.save(update_fields=["reminder_sent", "reminder_date"])
        return self._read(reservation)

    @extend_schema(
        parameters=[
            OpenApiParameter(
                name="room_type",
                type=OpenApiTypes.INT,
                location=OpenApiParameter.QUERY,
                required=True,
            ),
            OpenApiParameter(
                name="check_in_date",
                type=OpenApiTypes.DATE,
                location=OpenApiParameter.QUERY,
                required=True,
            ),
            OpenApiParameter(
                name="check_out_date",
                type=OpenApiTypes.DATE,
                location=OpenApiParameter.QUERY,
                required=True,
            ),
            OpenApiParameter(
                name="exclude",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                description="Reservation being edited; ignored when counting",
                required=False,
            ),
            OpenApiParameter(
                name="guest",
                type=OpenApiTypes.INT,
                location=OpenApiParameter.QUERY,
                description="List this guest's open reservations",
                required=False,
            ),
        ],
        responses={200: AvailabilitySerializer},
    )
    @action(detail=False, methods=["get"], url_path="availability", filter_backends=[])
    def availability(self, request):
        query = AvailabilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        room_type = query.validated_data["room_type"]
        check_in = query.validated_data["check_in_date"]
        check_out = query.validated_data["check_out_date"]
        exclude_id = query.validated_data.get("exclude")
        guest_id = query.validated_data.get("guest")

        policy = HotelSettings.load().to_policy()
        existing = load_type_reservations(room_type.pk, exclude_reservation_id=exclude_id)
        candidate = Reservation(
            id=exclude_id,
            room_type=room_type,
            check_in_date=check_in,
            check_out_date=check_out,
        )
        duration = (check_out - check_in).days
        open_reservations = []
        if guest_id is not None:
            open_reservations = list(
                Reservation.objects.open_for_guest(guest_id)
                .exclude(pk=exclude_id)
                .values_list("id", flat=True)
            )

        data = {
            "room_type": room_type.pk,
            "check_in_date": check_in,
            "check_out_date": check_out,
            "nights": duration,
            "overbooked_nights": find_overbooked_nights(candidate, existing, policy),
            "available_rooms": available_rooms(
                room_type.pk, check_in, check_out, existing, policy
            ),
            "next_available_date": next_feasible_start(
                room_type.pk, duration, check_in, existing, policy
            ),
            "open_reservations": open_reservations,
        }
        return Response(AvailabilitySerializer(data).data)

    def _attention_groups(self, policy, now):
        today = now.date()
        reservations = list(
            self.get_queryset().filter(
                status__in=(
                    Reservation.Status.CONFIRMED,
                    Reservation.Status.CHECKED_IN,
                )
            )
        )
        return {
            "overdue_checkouts": [
                r for r in reservations if state_machine.is_overdue_checkout(r, policy, now)
            ],
            "pending_reminders": [
                r for r in reservations if state_machine.needs_reminder(r, today)
            ],
            "no_show_risk": [
                r for r in reservations if state_machine.is_no_show_risk(r, now)
            ],
        }

    @extend_schema(responses={200: AlertsSerializer})
    @action(detail=False, methods=["get"], url_path="alerts", filter_backends=[])
    def alerts(self, request):
        """Reservations that need front desk attention right now."""
        policy = HotelSettings.load().to_policy()
        now = local_now()

        data = self._attention_groups(policy, now)
        context = self.get_serializer_context()
        context.update(policy=policy, now=now)
        return Response(AlertsSerializer(data, context=context).data)

    @extend_schema(responses={200: SummarySerializer})
    @action(detail=False, methods=["get"], url_path="summary", filter_backends=[])
    def summary(self, request):
        """Front desk dashboard figures; revenue counts bookings made this month."""
        policy = HotelSettings.load().to_policy()
        now = local_now()
        reservations = Reservation.objects.all()

        monthly_revenue = (
            reservations.filter(created_at__year=now.year, created_at__month=now.month)
            .exclude(status=Reservation.Status.CANCELLED)
            .aggregate(total=Sum("total_amount"))["total"]
        )
        data = {
            "total_reservations": reservations.count(),
            "total_guests": Guest.objects.count(),
            "upcoming_reservations": reservations.filter(
                status=Reservation.Status.CONFIRMED, check_in_date__gte=now.date()
            ).count(),
            "checked_in": reservations.filter(
                status=Reservation.Status.CHECKED_IN
            ).count(),
            "monthly_revenue": monthly_revenue or Decimal("0"),
        }
        for key, group in self._attention_groups(policy, now).items():
            data[key] = len(group)
        return Response(SummarySerializer(data).data)
