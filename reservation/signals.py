import logging

from django.db import transaction
from django.db.models.signals import post_save
from django.dispatch import receiver

from notifications.tasks import (
    send_cancellation_confirmation,
    send_telegram_notification,
)
from reservation.models import Reservation

logger = logging.getLogger(__name__)


def queue_cancellation_notices(reservation: Reservation, reason: str = "") -> None:
    """Email the guest and alert staff once the cancellation is committed."""
    message = (
        "❌ Reservation cancelled\n"
        f"Reservation: {reservation.id}\n"
        f"Guest: {reservation.guest.full_name} ({reservation.guest.email})\n"
        f"Dates: {reservation.check_in_date} - {reservation.check_out_date}"
    )
    if reason:
        message += f"\nReason: {reason}"

    def dispatch():
        send_cancellation_confirmation.delay(reservation.id)
        send_telegram_notification.delay(message)

    transaction.on_commit(dispatch)
    logger.info(f"Queued cancellation notices for reservation {reservation.id}")


@receiver(post_save, sender=Reservation)
def reservation_notification(sender, instance, created, update_fields=None, **kwargs):
    if created:
        message = (
            "🆕 New reservation\n"
            f"Reservation: {instance.id}\n"
            f"Guest: {instance.guest.full_name} ({instance.guest.email})\n"
            f"Room type: {instance.room_type.name}\n"
            f"Check-in: {instance.check_in_date}\n"
            f"Check-out: {instance.check_out_date}\n"
            f"Total: {instance.total_amount}"
        )
        transaction.on_commit(lambda: send_telegram_notification.delay(message))
        return

    if (
        update_fields
        and "status" in update_fields
        and instance.status == Reservation.Status.CANCELLED
    ):
        queue_cancellation_notices(instance, instance.cancellation_comment)
