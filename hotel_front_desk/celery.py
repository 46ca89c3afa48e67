import os

from celery import Celery
from celery.signals import worker_ready
from django.conf import settings

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "hotel_front_desk.settings")

app = Celery("hotel_front_desk")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()

interval_minutes = settings.AUTO_CANCEL_INTERVAL_MINUTES

app.conf.beat_schedule = {
    # No-show and elapsed-stay cancellation
    "auto-cancel-no-shows": {
        "task": "reservation.tasks.auto_cancel_no_shows",
        "schedule": interval_minutes * 60.0,
        "options": {"expires": interval_minutes * 60 - 10},
    },
}


@worker_ready.connect
def run_sweep_on_startup(sender, **kwargs):
    """Run one policy sweep as soon as a worker comes up."""
    with sender.app.connection() as conn:
        sender.app.send_task(
            "reservation.tasks.auto_cancel_no_shows", connection=conn
        )
