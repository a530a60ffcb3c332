import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("loft_algerie")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Expired reservation locks - every minute
    "sweep-expired-reservation-locks": {
        "task": "bookings.sweep_expired_reservation_locks",
        "schedule": 60.0,
        "options": {"expires": 50},
    },
    # Confirmed bookings past check-out - every hour
    "complete-finished-bookings": {
        "task": "bookings.complete_finished_bookings",
        "schedule": crontab(minute=15),
    },
}

app.conf.timezone = "Africa/Algiers"
