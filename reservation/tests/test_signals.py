from datetime import timedelta
from unittest.mock import patch

from django.test import TestCase
from django.utils import timezone

from reservation.models import Reservation
from reservation.services import state_machine
from reservation.tests.helpers import create_guest, create_reservation, create_room_type


@patch("reservation.signals.send_cancellation_confirmation.delay")
@patch("reservation.signals.send_telegram_notification.delay")
class ReservationNotificationTests(TestCase):
    def setUp(self):
        self.guest = create_guest()
        self.room_type = create_room_type()
        self.today = timezone.localdate()

    def book(self):
        return create_reservation(
            self.guest,
            self.room_type,
            self.today + timedelta(days=1),
            self.today + timedelta(days=3),
        )

    def test_new_reservation_alerts_staff_after_commit(self, mock_telegram, mock_email):
        with self.captureOnCommitCallbacks(execute=True):
            reservation = self.book()

        mock_telegram.assert_called_once()
        self.assertIn(reservation.id, mock_telegram.call_args.args[0])
        mock_email.assert_not_called()

    def test_nothing_is_sent_before_commit(self, mock_telegram, mock_email):
        with self.captureOnCommitCallbacks(execute=False) as callbacks:
            self.book()

        self.assertEqual(len(callbacks), 1)
        mock_telegram.assert_not_called()

    def test_cancellation_emails_guest_and_alerts_staff(self, mock_telegram, mock_email):
        reservation = self.book()
        fields = state_machine.cancel(reservation, "Guest called")

        with self.captureOnCommitCallbacks(execute=True):
            reservation.save(update_fields=fields)

        mock_email.assert_called_once_with(reservation.id)
        self.assertIn("Reason: Guest called", mock_telegram.call_args.args[0])

    def test_other_updates_send_nothing(self, mock_telegram, mock_email):
        reservation = self.book()
        reservation.special_requests = "Late arrival"

        with self.captureOnCommitCallbacks(execute=True):
            reservation.save(update_fields=["special_requests"])
            state_machine.check_in(reservation)
            reservation.save(update_fields=["status"])

        mock_email.assert_not_called()
        mock_telegram.assert_not_called()

    def test_cancelled_status_without_update_fields_is_ignored(self, mock_telegram, mock_email):
        reservation = self.book()
        reservation.status = Reservation.Status.CANCELLED

        with self.captureOnCommitCallbacks(execute=True):
            reservation.save()

        mock_email.assert_not_called()
