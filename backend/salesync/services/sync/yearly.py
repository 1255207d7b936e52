from __future__ import annotations

import datetime as dt
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from salesync.core.logging import logger
from salesync.db.models.sales import MonthlySale, YearlySale
from salesync.services.sync.units import UpsertResult, apply_unit
from salesync.services.sync.utils import money


def monthly_totals_by_store(db: Session, year: int, store_codes: list[str] | None = None) -> dict[str, Decimal]:
    q = select(MonthlySale.store_code, MonthlySale.total).where(
        MonthlySale.month.between(dt.date(year, 1, 1), dt.date(year, 12, 1))
    )
    if store_codes is not None:
        q = q.where(MonthlySale.store_code.in_(store_codes))
    out: dict[str, Decimal] = {}
    for store_code, total in db.execute(q):
        out[store_code] = out.get(store_code, money(0)) + money(total)
    return out


def _upsert(db: Session, existing: dict[str, YearlySale], store_code: str, year: int, total: Decimal) -> bool:
    row = existing.get(store_code)
    if row is not None:
        row.total = total
        return False
    row = YearlySale(store_code=store_code, year=year, total=total)
    db.add(row)
    existing[store_code] = row
    return True


def rollup_yearly(db: Session, year: int, store_codes: list[str] | None = None) -> UpsertResult:
    """Recompute YearlySale for each store from that year's MonthlySale rows."""
    totals = monthly_totals_by_store(db, year, store_codes)
    stores = sorted(set(store_codes)) if store_codes is not None else sorted(totals)

    result = UpsertResult()
    if not stores:
        logger.warning("yearly_rollup_no_data", year=year)
        return result

    existing = {
        r.store_code: r
        for r in db.scalars(
            select(YearlySale).where(YearlySale.year == year, YearlySale.store_code.in_(stores))
        )
    }
    for store_code in stores:
        apply_unit(
            db,
            result,
            "yearly",
            lambda: _upsert(db, existing, store_code, year, totals.get(store_code, money(0))),
            store_code=store_code,
            year=year,
        )

    logger.info(
        "yearly_rolled_up",
        year=year,
        created=result.created,
        updated=result.updated,
        failed=result.failed,
        stores=result.stores_processed,
    )
    return result
