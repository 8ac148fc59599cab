"""Celery application for the reminder worker."""

from celery import Celery
from celery.schedules import crontab

from cart_reminder.config import get_settings
from cart_reminder.log_config import configure_logging

settings = get_settings()
configure_logging()


def crontab_from_expression(expression: str) -> crontab:
    """Build a Celery crontab from a five-field cron expression."""
    fields = expression.split()
    if len(fields) != 5:
        raise ValueError(f"Expected five cron fields, got {len(fields)}: {expression!r}")
    minute, hour, day_of_month, month_of_year, day_of_week = fields
    return crontab(
        minute=minute,
        hour=hour,
        day_of_month=day_of_month,
        month_of_year=month_of_year,
        day_of_week=day_of_week,
    )


# Create Celery app
app = Celery(
    "reminder_worker",
    broker=settings.celery_broker,
    backend=settings.celery_backend,
    include=[
        "reminder_worker.tasks.abandoned_carts",
    ],
)

# Celery configuration
app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=600,  # 10 minutes
    task_soft_time_limit=540,  # 9 minutes
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_default_queue="reminders",
    task_routes={
        "reminder_worker.tasks.*": {"queue": "reminders"},
    },
)

# Beat schedule for periodic tasks
app.conf.beat_schedule = {}
if settings.abandoned_cart_check_enabled:
    app.conf.beat_schedule["check-abandoned-carts"] = {
        "task": "reminder_worker.tasks.abandoned_carts.process_abandoned_carts",
        "schedule": crontab_from_expression(settings.abandoned_cart_check_schedule),
    }


def run() -> None:
    """Run the Celery worker."""
    app.worker_main(["worker", "--loglevel=info", "-Q", "reminders"])


if __name__ == "__main__":
    run()
