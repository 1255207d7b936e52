from __future__ import annotations

import datetime as dt
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from salesync.core.logging import logger
from salesync.db.models.sale_line import SaleLine
from salesync.db.models.sales import DailySale
from salesync.db.models.store import Store
from salesync.services.sync.periods import iter_days
from salesync.services.sync.units import UpsertResult, apply_unit
from salesync.services.sync.utils import money

DayKey = tuple[str, dt.date]


def stores_for_days(db: Session, start: dt.date, end: dt.date, store_codes: list[str] | None = None) -> list[str]:
    """Active stores plus any store that sold something in the range."""
    if store_codes is not None:
        return sorted(set(store_codes))
    active = db.scalars(select(Store.code).where(Store.is_active.is_(True)))
    selling = db.scalars(
        select(SaleLine.store_code).where(SaleLine.sale_date.between(start, end)).distinct()
    )
    return sorted(set(active) | set(selling))


def channel_totals(
    db: Session, start: dt.date, end: dt.date, store_codes: list[str]
) -> dict[DayKey, dict[str, Decimal]]:
    q = (
        select(
            SaleLine.store_code,
            SaleLine.sale_date,
            SaleLine.channel,
            func.sum(SaleLine.total_price),
        )
        .where(
            SaleLine.sale_date.between(start, end),
            SaleLine.store_code.in_(store_codes),
        )
        .group_by(SaleLine.store_code, SaleLine.sale_date, SaleLine.channel)
    )
    out: dict[DayKey, dict[str, Decimal]] = {}
    for store_code, day, channel, amount in db.execute(q):
        out.setdefault((store_code, day), {})[channel] = money(amount)
    return out


def _existing(db: Session, start: dt.date, end: dt.date, store_codes: list[str]) -> dict[DayKey, DailySale]:
    rows = db.scalars(
        select(DailySale).where(
            DailySale.date.between(start, end),
            DailySale.store_code.in_(store_codes),
        )
    )
    return {(r.store_code, r.date): r for r in rows}


def _upsert(db: Session, existing: dict[DayKey, DailySale], key: DayKey, sums: dict[str, Decimal]) -> bool:
    invoiced = sums.get("invoiced", money(0))
    pos = sums.get("pos", money(0))
    exchange = sums.get("exchange", money(0))
    total = invoiced + pos + exchange

    row = existing.get(key)
    created = row is None
    if created:
        row = DailySale(store_code=key[0], date=key[1])
        db.add(row)
        existing[key] = row
    # replace, never add to what is stored
    row.invoiced = invoiced
    row.pos = pos
    row.exchange = exchange
    row.total = total
    return created


def aggregate_daily(
    db: Session, start: dt.date, end: dt.date, store_codes: list[str] | None = None
) -> UpsertResult:
    """Recompute DailySale for every (store, day) in the range from stored sale lines.

    Days without lines get an explicit zero row.
    """
    stores = stores_for_days(db, start, end, store_codes)
    result = UpsertResult()
    if not stores:
        logger.warning("daily_aggregate_no_stores", start=str(start), end=str(end))
        return result

    totals = channel_totals(db, start, end, stores)
    existing = _existing(db, start, end, stores)

    for store_code in stores:
        for day in iter_days(start, end):
            key = (store_code, day)
            apply_unit(
                db,
                result,
                "daily",
                lambda: _upsert(db, existing, key, totals.get(key, {})),
                store_code=store_code,
                date=str(day),
            )

    logger.info(
        "daily_aggregated",
        start=str(start),
        end=str(end),
        created=result.created,
        updated=result.updated,
        failed=result.failed,
        stores=result.stores_processed,
    )
    return result
