import logging
from decimal import Decimal

import requests
from celery import shared_task

from notifications.services.email import CANCELLATION, EmailNotifier
from notifications.services.telegram import send_message, subscriber_chat_ids
from reservation.models import Reservation
from room.models import HotelSettings, RoomType

logger = logging.getLogger(__name__)


@shared_task
def send_telegram_notification(message: str):
    """
    Fan the alert out to every subscribed Telegram staff chat, one task per chat
    """
    chat_ids = subscriber_chat_ids()
    for chat_id in chat_ids:
        send_telegram_message.delay(chat_id, message)
    return f"Queued alert for {len(chat_ids)} subscribers"


@shared_task(
    bind=True,
    autoretry_for=(requests.RequestException,),
    retry_kwargs={"max_retries": 3, "countdown": 10},
)
def send_telegram_message(self, chat_id: int, message: str):
    send_message(chat_id, message)
    return f"Sent alert to chat {chat_id}"


@shared_task
def send_cancellation_confirmation(reservation_id):
    """Email the guest that their reservation was cancelled."""
    try:
        reservation = Reservation.objects.select_related("guest", "room_type").get(
            pk=reservation_id
        )
    except Reservation.DoesNotExist:
        return f"Reservation {reservation_id} does not exist"

    result = EmailNotifier(HotelSettings.load()).send(
        CANCELLATION, reservation, reservation.guest
    )
    if result.success:
        return f"Cancellation confirmation sent for reservation {reservation_id}"
    return f"Cancellation confirmation failed for reservation {reservation_id}: {result.error}"


@shared_task
def send_price_change_notification(room_type_id, old_price: str, new_price: str):
    """Tell the configured recipients that a room type's base price changed."""
    hotel = HotelSettings.load()
    if not (hotel.price_change_notifications and hotel.price_change_recipients):
        return "Price change notifications are disabled"

    try:
        room_type = RoomType.objects.get(pk=room_type_id)
    except RoomType.DoesNotExist:
        return f"Room type {room_type_id} does not exist"

    result = EmailNotifier(hotel).send_price_change(
        room_type,
        Decimal(old_price),
        Decimal(new_price),
        hotel.price_change_recipients,
    )
    if result.success:
        return f"Price change notice sent to {len(hotel.price_change_recipients)} recipients"
    logger.warning(f"Price change notice for room type {room_type_id} failed: {result.error}")
    return f"Price change notice failed for room type {room_type_id}: {result.error}"
