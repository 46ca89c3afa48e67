import logging

import requests
from django.conf import settings

from notifications.models import TelegramSubscriber

logger = logging.getLogger(__name__)

API_URL = "https://api.telegram.org/bot{token}/sendMessage"


def subscriber_chat_ids() -> list[int]:
    """Chats that should receive the next alert; empty when no bot token is set."""
    if not settings.TELEGRAM_BOT_TOKEN:
        logger.warning("TELEGRAM_BOT_TOKEN is not set, staff alert dropped")
        return []
    return list(
        TelegramSubscriber.objects.receiving().values_list("chat_id", flat=True)
    )


def send_message(chat_id: int, text: str) -> None:
    """Post ``text`` to one chat; HTTP failures raise ``requests.RequestException``."""
    response = requests.post(
        API_URL.format(token=settings.TELEGRAM_BOT_TOKEN),
        json={"chat_id": chat_id, "text": text},
        timeout=10,
    )
    response.raise_for_status()
