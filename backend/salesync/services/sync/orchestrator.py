"""Entry points for the three sync operations.

Every call is a full recomputation of the requested window. Nothing is
checkpointed between calls, so any historical range can be re-supplied safely.
Ordering (daily before monthly before yearly) is the caller's responsibility;
see salesync.worker.tasks for the scheduled sequence.
"""
from __future__ import annotations

import datetime as dt

from sqlalchemy.orm import Session

from salesync.core.config import settings
from salesync.core.errors import SyncValidationError, UpstreamUnavailableError
from salesync.core.logging import logger
from salesync.schemas.sync import DailySyncOut, ItemErrorOut, MonthlySyncOut, YearlySyncOut
from salesync.services.sync.daily import aggregate_daily
from salesync.services.sync.monthly import rollup_monthly
from salesync.services.sync.sale_lines import import_sale_lines
from salesync.services.sync.yearly import rollup_yearly
from salesync.services.upstream.client import SaleItemSource

MIN_YEAR = 2000


def _now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def validate_range(start: dt.date, end: dt.date) -> None:
    if start is None or end is None:
        raise SyncValidationError("start_date and end_date are required")
    if end < start:
        raise SyncValidationError(f"end_date {end} is before start_date {start}")
    days = (end - start).days + 1
    if days > settings.MAX_SYNC_DAYS:
        raise SyncValidationError(f"Range of {days} days exceeds the limit of {settings.MAX_SYNC_DAYS}")


def validate_year(year: int, today: dt.date | None = None) -> None:
    today = today or dt.date.today()
    if year < MIN_YEAR or year > today.year + 1:
        raise SyncValidationError(f"Year must be between {MIN_YEAR} and {today.year + 1}, got {year}")


def normalize_store_codes(store_codes: list[str] | None) -> list[str] | None:
    if store_codes is None:
        return None
    codes = sorted({c.strip() for c in store_codes if c and c.strip()})
    if not codes:
        raise SyncValidationError("store_codes filter is empty")
    return codes


def sync_daily(
    db: Session,
    source: SaleItemSource,
    start: dt.date,
    end: dt.date,
    store_codes: list[str] | None = None,
) -> DailySyncOut:
    """Import sale lines for [start, end] and recompute the daily aggregates."""
    validate_range(start, end)
    store_codes = normalize_store_codes(store_codes)
    logger.info("daily_sync_start", start=str(start), end=str(end), store_codes=store_codes)

    try:
        items = source.fetch_sale_items(start, end)
    except UpstreamUnavailableError:
        raise
    except Exception as e:
        logger.exception("daily_sync_fetch_failed", start=str(start), end=str(end))
        raise UpstreamUnavailableError(f"Failed to fetch sale items: {e}") from e

    if store_codes is not None:
        wanted = set(store_codes)
        items = [i for i in items if i.store_code is None or i.store_code.strip() in wanted]

    imported = import_sale_lines(db, items)
    aggregated = aggregate_daily(db, start, end, store_codes)

    out = DailySyncOut(
        created=aggregated.created,
        updated=aggregated.updated,
        skipped=imported.skipped,
        failed=aggregated.failed,
        stores_processed=aggregated.stores_processed,
        items_received=imported.received,
        lines_inserted=imported.inserted,
        products_inserted=imported.products_inserted,
        start_date=start,
        end_date=end,
        processed_at=_now(),
        errors=[ItemErrorOut(**vars(e)) for e in imported.errors],
    )
    logger.info(
        "daily_sync_finished",
        start=str(start),
        end=str(end),
        created=out.created,
        updated=out.updated,
        skipped=out.skipped,
        failed=out.failed,
        stores=out.stores_processed,
        lines_inserted=out.lines_inserted,
    )
    return out


def sync_monthly(
    db: Session,
    start: dt.date,
    end: dt.date,
    store_codes: list[str] | None = None,
) -> MonthlySyncOut:
    """Roll daily aggregates up into every month touched by [start, end]."""
    validate_range(start, end)
    store_codes = normalize_store_codes(store_codes)
    logger.info("monthly_sync_start", start=str(start), end=str(end), store_codes=store_codes)

    result, months = rollup_monthly(db, start, end, store_codes)
    out = MonthlySyncOut(
        created=result.created,
        updated=result.updated,
        failed=result.failed,
        stores_processed=result.stores_processed,
        months_processed=months,
        start_date=start,
        end_date=end,
        processed_at=_now(),
    )
    logger.info(
        "monthly_sync_finished",
        created=out.created,
        updated=out.updated,
        failed=out.failed,
        stores=out.stores_processed,
        months=out.months_processed,
    )
    return out


def sync_yearly(db: Session, year: int, store_codes: list[str] | None = None) -> YearlySyncOut:
    """Roll monthly aggregates up into the given year."""
    validate_year(year)
    store_codes = normalize_store_codes(store_codes)
    logger.info("yearly_sync_start", year=year, store_codes=store_codes)

    result = rollup_yearly(db, year, store_codes)
    out = YearlySyncOut(
        created=result.created,
        updated=result.updated,
        failed=result.failed,
        stores_processed=result.stores_processed,
        year=year,
        processed_at=_now(),
    )
    logger.info(
        "yearly_sync_finished",
        year=year,
        created=out.created,
        updated=out.updated,
        failed=out.failed,
        stores=out.stores_processed,
    )
    return out
