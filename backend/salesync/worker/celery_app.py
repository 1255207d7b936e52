from celery import Celery
from celery.schedules import crontab

from salesync.core.config import settings
from salesync.core.logging import configure_logging

configure_logging(settings.ENV)


def cron(expr: str) -> crontab:
    """Build a celery crontab from a five-field cron expression."""
    fields = expr.split()
    if len(fields) != 5:
        raise ValueError(f"Expected 5 cron fields, got {len(fields)}: {expr!r}")
    minute, hour, day_of_month, month_of_year, day_of_week = fields
    return crontab(
        minute=minute,
        hour=hour,
        day_of_month=day_of_month,
        month_of_year=month_of_year,
        day_of_week=day_of_week,
    )


def build_beat_schedule() -> dict:
    if not settings.SCHEDULE_ENABLED:
        return {}
    schedule = {
        "sync-daily-yesterday": {
            "task": "sync.daily_yesterday",
            "schedule": cron(settings.DAILY_SYNC_CRON),
        },
    }
    if settings.WEEKLY_SYNC_ENABLED:
        schedule["sync-weekly-correction"] = {
            "task": "sync.weekly_correction",
            "schedule": cron(settings.WEEKLY_SYNC_CRON),
        }
    return schedule


celery_app = Celery(
    "salesync",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=["salesync.worker.tasks"],
)

celery_app.conf.update(
    timezone=settings.TZ,
    enable_utc=False,
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    # scheduled runs must not overlap: one sync at a time per worker
    worker_concurrency=settings.WORKER_CONCURRENCY,
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    beat_schedule=build_beat_schedule(),
)
