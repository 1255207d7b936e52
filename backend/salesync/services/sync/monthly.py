from __future__ import annotations

import datetime as dt
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from salesync.core.logging import logger
from salesync.db.models.sales import DailySale, MonthlySale
from salesync.services.sync.periods import month_end, month_start, month_starts
from salesync.services.sync.units import UpsertResult, apply_unit
from salesync.services.sync.utils import money

MonthKey = tuple[str, dt.date]


def daily_totals_by_month(
    db: Session, first: dt.date, last: dt.date, store_codes: list[str] | None = None
) -> dict[MonthKey, Decimal]:
    q = select(DailySale.store_code, DailySale.date, DailySale.total).where(DailySale.date.between(first, last))
    if store_codes is not None:
        q = q.where(DailySale.store_code.in_(store_codes))
    out: dict[MonthKey, Decimal] = {}
    for store_code, day, total in db.execute(q):
        key = (store_code, month_start(day))
        out[key] = out.get(key, money(0)) + money(total)
    return out


def _existing(db: Session, months: list[dt.date], store_codes: list[str]) -> dict[MonthKey, MonthlySale]:
    rows = db.scalars(
        select(MonthlySale).where(
            MonthlySale.month.in_(months),
            MonthlySale.store_code.in_(store_codes),
        )
    )
    return {(r.store_code, r.month): r for r in rows}


def _upsert(db: Session, existing: dict[MonthKey, MonthlySale], key: MonthKey, total: Decimal) -> bool:
    row = existing.get(key)
    if row is not None:
        row.total = total
        return False
    row = MonthlySale(store_code=key[0], month=key[1], total=total)
    db.add(row)
    existing[key] = row
    return True


def rollup_monthly(
    db: Session, start: dt.date, end: dt.date, store_codes: list[str] | None = None
) -> tuple[UpsertResult, int]:
    """Recompute MonthlySale for each (store, month) touched by [start, end].

    Each month is summed over all of its days, not just the requested slice,
    so a mid-month range still yields the full month total.
    Returns the upsert counts and the number of months covered.
    """
    months = month_starts(start, end)
    first, last = months[0], month_end(months[-1])

    totals = daily_totals_by_month(db, first, last, store_codes)
    if store_codes is not None:
        stores = sorted(set(store_codes))
    else:
        stores = sorted({store_code for store_code, _ in totals})

    result = UpsertResult()
    if not stores:
        logger.warning("monthly_rollup_no_data", start=str(start), end=str(end))
        return result, len(months)

    existing = _existing(db, months, stores)
    for store_code in stores:
        for month in months:
            key = (store_code, month)
            apply_unit(
                db,
                result,
                "monthly",
                lambda: _upsert(db, existing, key, totals.get(key, money(0))),
                store_code=store_code,
                month=month.strftime("%Y-%m"),
            )

    logger.info(
        "monthly_rolled_up",
        start=str(start),
        end=str(end),
        months=len(months),
        created=result.created,
        updated=result.updated,
        failed=result.failed,
        stores=result.stores_processed,
    )
    return result, len(months)
