import datetime as dt
from sqlalchemy.orm import Session

from salesync.worker.celery_app import celery_app
from salesync.core.logging import logger
from salesync.db.session import SessionLocal
from salesync.services.sync.orchestrator import sync_daily, sync_monthly, sync_yearly
from salesync.services.sync.periods import (
    local_today,
    monthly_window,
    weekly_correction_window,
    yearly_target,
    yesterday,
)
from salesync.services.upstream.client import LegacySalesClient


def _date(v) -> dt.date:
    return v if isinstance(v, dt.date) else dt.date.fromisoformat(v)


def run_daily_yesterday(db: Session, source, today: dt.date) -> dict:
    """Daily, then monthly, then yearly. Each step reads what the previous one wrote."""
    day = yesterday(today)
    m_start, m_end = monthly_window(today)
    year = yearly_target(today)

    daily = sync_daily(db, source, day, day)
    monthly = sync_monthly(db, m_start, m_end)
    yearly = sync_yearly(db, year)
    return {
        "daily": daily.model_dump(mode="json"),
        "monthly": monthly.model_dump(mode="json"),
        "yearly": yearly.model_dump(mode="json"),
    }


def run_weekly_correction(db: Session, source, today: dt.date) -> dict:
    """Re-run the last seven days, then re-roll every month and year they touch."""
    start, end = weekly_correction_window(today)
    daily = sync_daily(db, source, start, end)
    monthly = sync_monthly(db, start, end)
    # the window can straddle new year; the daily job only rolls the current year
    yearly = [sync_yearly(db, year) for year in sorted({start.year, end.year})]
    return {
        "daily": daily.model_dump(mode="json"),
        "monthly": monthly.model_dump(mode="json"),
        "yearly": [y.model_dump(mode="json") for y in yearly],
    }


@celery_app.task(name="sync.daily_yesterday", bind=True)
def daily_yesterday_task(self):
    db: Session = SessionLocal()
    today = local_today()
    try:
        out = run_daily_yesterday(db, LegacySalesClient(), today)
        logger.info("scheduled_daily_finished", today=str(today), task_id=self.request.id)
        return out
    except Exception as e:
        db.rollback()
        logger.exception("scheduled_daily_failed", today=str(today), error=str(e))
        raise
    finally:
        db.close()


@celery_app.task(name="sync.weekly_correction", bind=True)
def weekly_correction_task(self):
    db: Session = SessionLocal()
    today = local_today()
    try:
        out = run_weekly_correction(db, LegacySalesClient(), today)
        logger.info("weekly_correction_finished", today=str(today), task_id=self.request.id)
        return out
    except Exception as e:
        db.rollback()
        logger.exception("weekly_correction_failed", today=str(today), error=str(e))
        raise
    finally:
        db.close()


@celery_app.task(name="sync.daily", bind=True)
def daily_task(self, start_date, end_date, store_codes: list[str] | None = None):
    db: Session = SessionLocal()
    try:
        out = sync_daily(db, LegacySalesClient(store_codes=store_codes), _date(start_date), _date(end_date), store_codes)
        return out.model_dump(mode="json")
    except Exception as e:
        db.rollback()
        logger.exception("daily_task_failed", start=str(start_date), end=str(end_date), error=str(e))
        raise
    finally:
        db.close()


@celery_app.task(name="sync.monthly", bind=True)
def monthly_task(self, start_date, end_date, store_codes: list[str] | None = None):
    db: Session = SessionLocal()
    try:
        out = sync_monthly(db, _date(start_date), _date(end_date), store_codes)
        return out.model_dump(mode="json")
    except Exception as e:
        db.rollback()
        logger.exception("monthly_task_failed", start=str(start_date), end=str(end_date), error=str(e))
        raise
    finally:
        db.close()


@celery_app.task(name="sync.yearly", bind=True)
def yearly_task(self, year: int, store_codes: list[str] | None = None):
    db: Session = SessionLocal()
    try:
        out = sync_yearly(db, int(year), store_codes)
        return out.model_dump(mode="json")
    except Exception as e:
        db.rollback()
        logger.exception("yearly_task_failed", year=year, error=str(e))
        raise
    finally:
        db.close()
