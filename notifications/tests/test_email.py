from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

from django.core import mail
from django.test import TestCase, override_settings
from django.utils import timezone

from notifications.services.email import CANCELLATION, PRICE_CHANGE, REMINDER, EmailNotifier
from notifications.tasks import send_cancellation_confirmation, send_price_change_notification
from reservation.models import Reservation
from reservation.tests.helpers import create_guest, create_reservation, create_room_type
from room.models import HotelSettings


@override_settings(
    EMAIL_BACKEND="django.core.mail.backends.locmem.EmailBackend",
    DEFAULT_FROM_EMAIL="desk@test.com",
)
class EmailNotifierTests(TestCase):
    def setUp(self):
        self.guest = create_guest(first_name="Ana", last_name="Lopez", email="ana@test.com")
        self.room_type = create_room_type(name="Suite")
        today = timezone.localdate()
        self.reservation = create_reservation(
            self.guest,
            self.room_type,
            today + timedelta(days=2),
            today + timedelta(days=4),
            special_requests="Crib & extra towels",
        )

    def test_render_reminder(self):
        subject, text, html = EmailNotifier().render(
            REMINDER, self.reservation, self.guest
        )

        self.assertEqual(subject, "Reservation Reminder - Ana Lopez")
        self.assertIn(self.reservation.id, text)
        self.assertIn("Suite", text)
        self.assertIn("Crib & extra towels", text)
        self.assertIn("Crib &amp; extra towels", html)

    def test_send_reminder_uses_default_sender(self):
        result = EmailNotifier().send(REMINDER, self.reservation, self.guest)

        self.assertTrue(result.success)
        self.assertEqual(len(mail.outbox), 1)
        message = mail.outbox[0]
        self.assertEqual(message.from_email, "desk@test.com")
        self.assertEqual(message.to, ["ana@test.com"])
        self.assertEqual(message.alternatives[0][1], "text/html")

    def test_hotel_sender_and_name_are_used(self):
        hotel = HotelSettings.load()
        hotel.hotel_name = "Lakeside Inn"
        hotel.from_email = "stay@lakeside.test"
        hotel.save()

        EmailNotifier(hotel).send(CANCELLATION, self.reservation, self.guest)

        message = mail.outbox[0]
        self.assertEqual(message.from_email, "stay@lakeside.test")
        self.assertIn("Lakeside Inn", message.body)
        self.assertTrue(message.subject.startswith("Reservation Cancellation Confirmation"))

    def test_cancellation_includes_reason(self):
        self.reservation.cancellation_comment = "Flight cancelled"

        _, text, _ = EmailNotifier().render(CANCELLATION, self.reservation, self.guest)

        self.assertIn("Reason: Flight cancelled", text)

    def test_delivery_failure_is_reported(self):
        with patch(
            "notifications.services.email.EmailMultiAlternatives.send",
            side_effect=ConnectionRefusedError("SMTP down"),
        ), self.assertLogs("notifications.services.email", level="ERROR"):
            result = EmailNotifier().send(REMINDER, self.reservation, self.guest)

        self.assertFalse(result.success)
        self.assertIn("SMTP down", result.error)
        self.assertEqual(mail.outbox, [])


@override_settings(EMAIL_BACKEND="django.core.mail.backends.locmem.EmailBackend")
class SendCancellationConfirmationTests(TestCase):
    def setUp(self):
        guest = create_guest()
        room_type = create_room_type()
        today = timezone.localdate()
        self.reservation = create_reservation(
            guest,
            room_type,
            today + timedelta(days=1),
            today + timedelta(days=2),
            status=Reservation.Status.CANCELLED,
        )

    def test_sends_confirmation(self):
        result = send_cancellation_confirmation(self.reservation.id)

        self.assertIn("sent", result)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["jane@test.com"])

    def test_missing_reservation(self):
        result = send_cancellation_confirmation("RES-000000-XXXX")

        self.assertIn("does not exist", result)
        self.assertEqual(mail.outbox, [])


@override_settings(
    EMAIL_BACKEND="django.core.mail.backends.locmem.EmailBackend",
    DEFAULT_FROM_EMAIL="desk@test.com",
)
class SendPriceChangeNotificationTests(TestCase):
    def setUp(self):
        self.room_type = create_room_type(name="Suite", base_price=Decimal("250.00"))
        self.hotel = HotelSettings.load()
        self.hotel.price_change_notifications = True
        self.hotel.price_change_recipients = ["owner@test.com", "sales@test.com"]
        self.hotel.save()

    def test_render_price_change(self):
        subject, text, _ = EmailNotifier().render_template(
            PRICE_CHANGE,
            {
                "room_type": self.room_type,
                "old_price": Decimal("200.00"),
                "new_price": Decimal("250.00"),
            },
        )

        self.assertEqual(subject, "Room Price Change - Suite")
        self.assertIn("Old Price: $200.00", text)
        self.assertIn("New Price: $250.00", text)

    def test_sends_to_configured_recipients(self):
        result = send_price_change_notification(self.room_type.id, "200.00", "250.00")

        self.assertIn("sent to 2 recipients", result)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["owner@test.com", "sales@test.com"])
        self.assertIn("Suite", mail.outbox[0].subject)

    def test_disabled_setting_skips_email(self):
        self.hotel.price_change_notifications = False
        self.hotel.save()

        result = send_price_change_notification(self.room_type.id, "200.00", "250.00")

        self.assertEqual(result, "Price change notifications are disabled")
        self.assertEqual(mail.outbox, [])

    def test_no_recipients_skips_email(self):
        self.hotel.price_change_recipients = []
        self.hotel.save()

        send_price_change_notification(self.room_type.id, "200.00", "250.00")

        self.assertEqual(mail.outbox, [])

    def test_missing_room_type(self):
        result = send_price_change_notification(9999, "200.00", "250.00")

        self.assertIn("does not exist", result)
        self.assertEqual(mail.outbox, [])
