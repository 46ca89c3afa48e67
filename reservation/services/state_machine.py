"""Reservation status transitions and the time-based policies around them.

    confirmed -> checked-in -> checked-out
    confirmed -> cancelled
    checked-in -> cancelled

``checked-out`` and ``cancelled`` are terminal.
"""

from dataclasses import dataclass
from datetime import datetime, time, timedelta

from reservation.exceptions import InvalidTransition
from reservation.models import Reservation
from reservation.services.clock import HotelPolicy, resolve_instant

Status = Reservation.Status

TRANSITIONS = {
    Status.CONFIRMED.value: frozenset({Status.CHECKED_IN.value, Status.CANCELLED.value}),
    Status.CHECKED_IN.value: frozenset({Status.CHECKED_OUT.value, Status.CANCELLED.value}),
    Status.CHECKED_OUT.value: frozenset(),
    Status.CANCELLED.value: frozenset(),
}

NO_SHOW_CUTOFF = time(11, 0)
NO_SHOW_RISK_FROM = time(1, 0)
REMINDER_WINDOW_DAYS = 3


@dataclass(frozen=True)
class AutoCancellation:
    reservation: Reservation
    reason: str


def can_transition(current, target) -> bool:
    return str(target) in TRANSITIONS.get(str(current), frozenset())


def apply_transition(reservation, target, comment=None) -> list[str]:
    """Move ``reservation`` to ``target`` in memory and return the changed fields."""
    if not can_transition(reservation.status, target):
        raise InvalidTransition(reservation.status, target)

    reservation.status = target
    update_fields = ["status"]
    if target == Status.CANCELLED and comment:
        reservation.cancellation_comment = comment
        update_fields.append("cancellation_comment")
    return update_fields


def check_in(reservation) -> list[str]:
    return apply_transition(reservation, Status.CHECKED_IN)


def check_out(reservation) -> list[str]:
    return apply_transition(reservation, Status.CHECKED_OUT)


def cancel(reservation, reason=None) -> list[str]:
    return apply_transition(reservation, Status.CANCELLED, reason)


def _minute(now: datetime) -> datetime:
    return now.replace(second=0, microsecond=0)


def no_show_reason(reservation, now: datetime, cutoff: time = NO_SHOW_CUTOFF) -> str | None:
    """Why a confirmed reservation should be auto-cancelled at ``now``, if at all.

    Two independent conditions: the guest has not arrived by ``cutoff`` on
    check-in day, or the whole stay has elapsed without a check-in.
    """
    if reservation.status != Status.CONFIRMED:
        return None

    today = now.date()
    if reservation.check_out_date < today:
        return (
            "Automatically cancelled - Guest did not check in by departure "
            f"date ({reservation.check_out_date:%Y-%m-%d})"
        )

    cutoff_at = resolve_instant(today, cutoff, now.tzinfo)
    if reservation.check_in_date == today and now >= cutoff_at:
        return (
            f"Automatically cancelled - Guest did not check in by "
            f"{cutoff:%H:%M} on {reservation.check_in_date:%Y-%m-%d}"
        )

    return None


def sweep(reservations, now: datetime, cutoff: time = NO_SHOW_CUTOFF) -> list[AutoCancellation]:
    """Decide which reservations the policy cancels; mutates nothing."""
    decisions = []
    for reservation in reservations:
        reason = no_show_reason(reservation, now, cutoff)
        if reason:
            decisions.append(AutoCancellation(reservation, reason))
    return decisions


def is_overdue_checkout(reservation, policy: HotelPolicy, now: datetime) -> bool:
    if reservation.status != Status.CHECKED_IN:
        return False
    return _minute(now) > policy.check_out_instant(reservation.check_out_date)


def needs_reminder(reservation, today) -> bool:
    if reservation.status != Status.CONFIRMED or reservation.reminder_sent:
        return False
    days_until = (reservation.check_in_date - today).days
    return 0 <= days_until <= REMINDER_WINDOW_DAYS


def is_no_show_risk(reservation, now: datetime) -> bool:
    # Literal rule: the day after check-in, from 01:00. The 11:00 cutoff on
    # check-in day normally cancels these first.
    if reservation.status != Status.CONFIRMED:
        return False
    return (
        now.date() == reservation.check_in_date + timedelta(days=1)
        and now.time() >= NO_SHOW_RISK_FROM
    )
