import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("tripostay")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# Periodic tasks, stored in the database scheduler by django-celery-beat.
app.conf.beat_schedule = {
    # Confirmed stays whose check-out date has passed become completed.
    "complete-finished-bookings": {
        "task": "bookings.complete_finished_bookings",
        "schedule": crontab(minute=15),
    },
}

app.conf.timezone = "Asia/Riyadh"
