"""Room availability and booking-conflict engine.

Pure functions over an in-memory snapshot: reservations and rooms are any
objects exposing the model attribute names (``room_type_id``,
``specific_room_id``, ``check_in_date``, ``check_out_date``, ``status``;
``room_type_id`` and ``is_active`` on rooms). Nothing here touches the
database.
"""

from datetime import date, timedelta

from reservation.models import Reservation
from reservation.services.clock import HotelPolicy, local_today, nights

MAX_SEARCH_DAYS = 365

RELEASED_STATUSES = (
    Reservation.Status.CANCELLED,
    Reservation.Status.CHECKED_OUT,
)


def overlaps(a_start, a_end, b_start, b_end) -> bool:
    """Half-open interval overlap: [a_start, a_end) vs [b_start, b_end)."""
    return a_start < b_end and b_start < a_end


def occupying_reservations(reservations, room_type_id, exclude_reservation_id=None):
    """Same-type reservations that still hold inventory."""
    return [
        reservation
        for reservation in reservations
        if reservation.status not in RELEASED_STATUSES
        and reservation.room_type_id == room_type_id
        and (
            exclude_reservation_id is None
            or reservation.pk != exclude_reservation_id
        )
    ]


def find_overbooked_nights(candidate, existing_reservations, policy: HotelPolicy) -> list[date]:
    """Nights of the candidate's stay on which its room type would be oversold.

    An empty list means the booking is admissible. A reservation is never
    counted against itself, so an edit can pass the stored version of the
    same reservation in ``existing_reservations``.
    """
    capacity = len(policy.active_rooms(candidate.room_type_id))
    others = occupying_reservations(
        existing_reservations, candidate.room_type_id, candidate.pk
    )
    windows = [
        policy.stay_window(reservation.check_in_date, reservation.check_out_date)
        for reservation in others
    ]

    overbooked = []
    for night in nights(candidate.check_in_date, candidate.check_out_date):
        night_start = policy.check_in_instant(night)
        night_end = policy.check_out_instant(night + timedelta(days=1))
        occupied = sum(
            1
            for start, end in windows
            if overlaps(start, end, night_start, night_end)
        )
        if occupied + 1 > capacity:
            overbooked.append(night)

    return overbooked


def partition_overlapping(
    room_type_id,
    check_in: date,
    check_out: date,
    existing_reservations,
    policy: HotelPolicy,
    exclude_reservation_id=None,
) -> tuple[set, int]:
    """Split stays overlapping the window into pinned room ids and a generic count."""
    start, end = policy.stay_window(check_in, check_out)
    pinned = set()
    generic = 0

    for reservation in occupying_reservations(
        existing_reservations, room_type_id, exclude_reservation_id
    ):
        res_start, res_end = policy.stay_window(
            reservation.check_in_date, reservation.check_out_date
        )
        if not overlaps(res_start, res_end, start, end):
            continue
        if reservation.specific_room_id:
            pinned.add(reservation.specific_room_id)
        else:
            generic += 1

    return pinned, generic


def available_rooms(
    room_type_id,
    check_in: date,
    check_out: date,
    existing_reservations,
    policy: HotelPolicy,
    exclude_reservation_id=None,
) -> list:
    pinned, generic = partition_overlapping(
        room_type_id,
        check_in,
        check_out,
        existing_reservations,
        policy,
        exclude_reservation_id,
    )
    unpinned = [
        room for room in policy.active_rooms(room_type_id) if room.pk not in pinned
    ]
    bookable = max(0, len(unpinned) - generic)
    return unpinned[:bookable]


def next_feasible_start(
    room_type_id,
    duration_days: int,
    from_date: date,
    existing_reservations,
    policy: HotelPolicy,
    exclude_reservation_id=None,
    today: date | None = None,
) -> date | None:
    """Earliest start date after ``from_date`` with a room free for the whole stay.

    Capacity over time is an arbitrary step function, so this is a bounded
    linear scan; ``None`` means nothing was found within ``MAX_SEARCH_DAYS``.
    """
    if duration_days <= 0 or not policy.active_rooms(room_type_id):
        return None

    today = today or local_today(policy.tz)
    start = max(today, from_date + timedelta(days=1))
    duration = timedelta(days=duration_days)

    for _ in range(MAX_SEARCH_DAYS):
        rooms = available_rooms(
            room_type_id,
            start,
            start + duration,
            existing_reservations,
            policy,
            exclude_reservation_id,
        )
        if rooms:
            return start
        start += timedelta(days=1)

    return None


def room_calendar(room, date_from: date, date_to: date, existing_reservations, policy: HotelPolicy) -> list[dict]:
    """Per-day availability of one room, ``date_from`` to ``date_to`` inclusive.

    A day is unavailable when the room is pinned by an overlapping stay or
    when generic bookings have consumed every unpinned room of its type.
    """
    calendar = []
    current = date_from
    while current <= date_to:
        next_day = current + timedelta(days=1)
        pinned, _ = partition_overlapping(
            room.room_type_id, current, next_day, existing_reservations, policy
        )
        free = room.is_active and room.pk not in pinned and bool(
            available_rooms(
                room.room_type_id, current, next_day, existing_reservations, policy
            )
        )
        calendar.append({"date": current, "available": free})
        current = next_day
    return calendar
