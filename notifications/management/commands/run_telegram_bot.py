import asyncio

from aiogram import Bot, Dispatcher
from aiogram.filters import Command as BotCommand
from aiogram.filters import CommandStart
from aiogram.types import Message
from asgiref.sync import sync_to_async
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from notifications.models import TelegramSubscriber


def subscribe(chat_id, title):
    subscriber, _ = TelegramSubscriber.objects.update_or_create(
        chat_id=chat_id, defaults={"title": title, "is_active": True}
    )
    return subscriber


def unsubscribe(chat_id):
    return TelegramSubscriber.objects.filter(chat_id=chat_id).update(is_active=False)


class Command(BaseCommand):
    help = "Run the Telegram bot that subscribes staff chats to front desk alerts"

    def handle(self, *args, **options):
        if not settings.TELEGRAM_BOT_TOKEN:
            raise CommandError("TELEGRAM_BOT_TOKEN is not set")
        asyncio.run(self.run_bot(settings.TELEGRAM_BOT_TOKEN))

    async def run_bot(self, token):
        bot = Bot(token=token)
        dp = Dispatcher()

        @dp.message(CommandStart())
        async def start_handler(message: Message):
            title = message.chat.title or message.chat.full_name or ""
            await sync_to_async(subscribe)(message.chat.id, title)
            await message.answer(
                "✅ Subscribed to front desk alerts. Send /stop to mute them."
            )

        @dp.message(BotCommand("stop"))
        async def stop_handler(message: Message):
            await sync_to_async(unsubscribe)(message.chat.id)
            await message.answer("🔕 Front desk alerts muted. Send /start to resume.")

        self.stdout.write(self.style.SUCCESS("🤖 Telegram bot started"))
        await dp.start_polling(bot)
