import logging
from dataclasses import dataclass

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string

logger = logging.getLogger(__name__)

REMINDER = "reminder"
CANCELLATION = "cancellation"
PRICE_CHANGE = "price_change"

TEMPLATES = {
    REMINDER: "notifications/email/reminder",
    CANCELLATION: "notifications/email/cancellation",
    PRICE_CHANGE: "notifications/email/price_change",
}


@dataclass(frozen=True)
class NotificationResult:
    success: bool
    error: str = ""


class EmailNotifier:
    """Sends templated emails. ``send*`` methods report failures instead of raising."""

    def __init__(self, hotel_settings=None, connection=None):
        self.hotel_settings = hotel_settings
        self.connection = connection

    @property
    def from_email(self) -> str:
        if self.hotel_settings and self.hotel_settings.from_email:
            return self.hotel_settings.from_email
        return settings.DEFAULT_FROM_EMAIL

    @property
    def hotel_name(self) -> str:
        return getattr(self.hotel_settings, "hotel_name", "")

    def render_template(self, kind, context) -> tuple[str, str, str]:
        template = TEMPLATES[kind]
        context = {"hotel_name": self.hotel_name, **context}
        subject = render_to_string(f"{template}_subject.txt", context)
        text = render_to_string(f"{template}.txt", context)
        html = render_to_string(f"{template}.html", context)
        return " ".join(subject.split()), text, html

    @staticmethod
    def reservation_context(reservation, guest) -> dict:
        return {
            "reservation": reservation,
            "guest": guest,
            "room_type_name": getattr(
                reservation.room_type, "name", reservation.room_type_id
            ),
        }

    def render(self, kind, reservation, guest) -> tuple[str, str, str]:
        return self.render_template(kind, self.reservation_context(reservation, guest))

    def deliver(self, kind, context, recipients, label) -> NotificationResult:
        try:
            subject, text, html = self.render_template(kind, context)
            message = EmailMultiAlternatives(
                subject,
                text,
                self.from_email,
                list(recipients),
                connection=self.connection,
            )
            message.attach_alternative(html, "text/html")
            message.send()
        except Exception as exc:
            logger.exception(f"Failed to send {kind} email for {label}")
            return NotificationResult(success=False, error=str(exc))

        logger.info(f"Sent {kind} email for {label} to {', '.join(recipients)}")
        return NotificationResult(success=True)

    def send(self, kind, reservation, guest) -> NotificationResult:
        return self.deliver(
            kind,
            self.reservation_context(reservation, guest),
            [guest.email],
            f"reservation {reservation.pk}",
        )

    def send_price_change(self, room_type, old_price, new_price, recipients) -> NotificationResult:
        context = {
            "room_type": room_type,
            "old_price": old_price,
            "new_price": new_price,
        }
        return self.deliver(
            PRICE_CHANGE, context, recipients, f"room type {room_type.pk}"
        )
