"""Calendar date + hotel wall-clock time -> comparable instant.

All date/time resolution for availability and policy decisions goes through
this module. Instants are timezone-aware datetimes in the hotel's local zone
(``settings.TIME_ZONE`` unless a policy carries its own), so a calendar day
maps to exactly one instant for a given time of day.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo

from django.utils import timezone


def parse_time_of_day(value) -> time:
    """Accept ``"HH:MM"`` or a ``datetime.time`` and return a ``time``."""
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)

    try:
        hours, minutes = (int(part) for part in str(value).split(":"))
        return time(hours, minutes)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid time of day {value!r}, expected HH:MM") from exc


def to_local_date(day, tz: tzinfo | None = None) -> date:
    tz = tz or timezone.get_current_timezone()
    if isinstance(day, datetime):
        if timezone.is_aware(day):
            return timezone.localtime(day, tz).date()
        return day.date()
    return day


def resolve_instant(day, time_of_day, tz: tzinfo | None = None) -> datetime:
    tz = tz or timezone.get_current_timezone()
    return datetime.combine(
        to_local_date(day, tz), parse_time_of_day(time_of_day), tzinfo=tz
    )


def local_now(tz: tzinfo | None = None) -> datetime:
    return timezone.localtime(timezone.now(), tz or timezone.get_current_timezone())


def local_today(tz: tzinfo | None = None) -> date:
    return local_now(tz).date()


def nights(check_in: date, check_out: date):
    """Yield every occupied date of a stay; check-out itself is excluded."""
    current = check_in
    while current < check_out:
        yield current
        current += timedelta(days=1)


@dataclass(frozen=True)
class HotelPolicy:
    check_in_time: time
    check_out_time: time
    rooms: tuple = ()
    tz: tzinfo | None = None

    def active_rooms(self, room_type_id) -> list:
        return [
            room
            for room in self.rooms
            if room.is_active and room.room_type_id == room_type_id
        ]

    def check_in_instant(self, day) -> datetime:
        return resolve_instant(day, self.check_in_time, self.tz)

    def check_out_instant(self, day) -> datetime:
        return resolve_instant(day, self.check_out_time, self.tz)

    def stay_window(self, check_in, check_out) -> tuple[datetime, datetime]:
        return self.check_in_instant(check_in), self.check_out_instant(check_out)
