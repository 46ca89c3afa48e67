from unittest.mock import MagicMock, call, patch

import requests
from django.test import TestCase, override_settings

from notifications.management.commands.run_telegram_bot import subscribe, unsubscribe
from notifications.models import TelegramSubscriber
from notifications.services.telegram import send_message
from notifications.tasks import send_telegram_message, send_telegram_notification

@override_settings(TELEGRAM_BOT_TOKEN="test-token")
class SendTelegramNotificationTests(TestCase):
    def setUp(self):
        TelegramSubscriber.objects.create(chat_id=111)
        TelegramSubscriber.objects.create(chat_id=222)

    @patch("notifications.tasks.send_telegram_message.delay")
    def test_queues_one_send_per_subscriber(self, mock_delay):
        result = send_telegram_notification.run("New reservation")

        mock_delay.assert_has_calls(
            [call(111, "New reservation"), call(222, "New reservation")],
            any_order=True,
        )
        self.assertEqual(mock_delay.call_count, 2)
        self.assertEqual(result, "Queued alert for 2 subscribers")

    @override_settings(TELEGRAM_BOT_TOKEN="")
    @patch("notifications.tasks.send_telegram_message.delay")
    def test_missing_token_drops_alert(self, mock_delay):
        with self.assertLogs("notifications.services.telegram", level="WARNING"):
            result = send_telegram_notification.run("New reservation")

        mock_delay.assert_not_called()
        self.assertEqual(result, "Queued alert for 0 subscribers")

    @patch("notifications.services.telegram.requests.post")
    def test_send_posts_to_a_single_chat(self, mock_post):
        mock_post.return_value = MagicMock(status_code=200)

        result = send_telegram_message.run(111, "New reservation")

        mock_post.assert_called_once()
        self.assertEqual(
            mock_post.call_args.kwargs["json"], {"chat_id": 111, "text": "New reservation"}
        )
        self.assertIn("bottest-token", mock_post.call_args.args[0])
        self.assertEqual(result, "Sent alert to chat 111")

    @patch("notifications.services.telegram.requests.post")
    def test_http_error_propagates(self, mock_post):
        response = MagicMock()
        response.raise_for_status.side_effect = requests.HTTPError("502")
        mock_post.return_value = response

        with self.assertRaises(requests.HTTPError):
            send_message(222, "New reservation")

        self.assertEqual(mock_post.call_count, 1)


class SubscriptionTests(TestCase):
    def test_stop_mutes_and_start_resumes(self):
        subscribe(333, "Night shift")
        unsubscribe(333)

        self.assertFalse(TelegramSubscriber.objects.receiving().exists())

        subscriber = subscribe(333, "Night shift")

        self.assertTrue(subscriber.is_active)
        self.assertEqual(TelegramSubscriber.objects.count(), 1)

    @override_settings(TELEGRAM_BOT_TOKEN="test-token")
    @patch("notifications.tasks.send_telegram_message.delay")
    def test_muted_chats_are_skipped(self, mock_delay):
        subscribe(111, "Front desk")
        subscribe(222, "Managers")
        unsubscribe(222)

        send_telegram_notification.run("Room 101 overdue")

        mock_delay.assert_called_once_with(111, "Room 101 overdue")
