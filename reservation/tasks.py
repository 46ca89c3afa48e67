import logging

from celery import shared_task
from django.conf import settings
from django.db import DatabaseError

from reservation.models import Reservation
from reservation.services.clock import local_now, parse_time_of_day
from reservation.services.state_machine import sweep
from reservation.signals import queue_cancellation_notices

logger = logging.getLogger(__name__)


@shared_task
def auto_cancel_no_shows():
    """Cancel confirmed reservations whose guest missed the check-in cutoff
    or whose whole stay has already elapsed."""
    now = local_now()
    cutoff = parse_time_of_day(settings.NO_SHOW_CUTOFF_TIME)

    candidates = Reservation.objects.filter(
        status=Reservation.Status.CONFIRMED, check_in_date__lte=now.date()
    ).select_related("guest")
    cancelled_count = 0

    for decision in sweep(candidates, now, cutoff):
        reservation = decision.reservation
        try:
            updated = Reservation.objects.filter(
                pk=reservation.pk, status=Reservation.Status.CONFIRMED
            ).update(
                status=Reservation.Status.CANCELLED,
                cancellation_comment=decision.reason,
            )
        except DatabaseError:
            logger.exception(
                f"Could not auto-cancel reservation {reservation.pk}, "
                "will retry on the next pass"
            )
            continue

        if not updated:
            continue

        cancelled_count += 1
        logger.info(f"Auto-cancelled reservation {reservation.pk}: {decision.reason}")
        queue_cancellation_notices(reservation, decision.reason)

    return f"Auto-cancelled {cancelled_count} reservations"
