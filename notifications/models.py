from django.db import models


class TelegramSubscriberQuerySet(models.QuerySet):
    def receiving(self):
        return self.filter(is_active=True)


class TelegramSubscriber(models.Model):
    """Staff chat receiving front desk alerts; /stop mutes it without deleting."""

    chat_id = models.BigIntegerField(unique=True)
    title = models.CharField(max_length=255, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = TelegramSubscriberQuerySet.as_manager()

    class Meta:
        ordering = ("created_at",)

    def __str__(self):
        return self.title or str(self.chat_id)
