import datetime as dt
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from salesync.core.errors import SyncValidationError, UpstreamUnavailableError
from salesync.db.models.sale_line import SaleLine
from salesync.db.models.sales import DailySale, MonthlySale, YearlySale
from salesync.services.sync.orchestrator import sync_daily, sync_monthly, sync_yearly

DAY = dt.date(2025, 9, 13)


class BrokenSource:
    def fetch_sale_items(self, start, end):
        raise ConnectionError("legacy api down")


def test_daily_result_counts(db, source, item):
    src = source([
        item(sale_code="V1", ref="P1", store="000002", total="1000.00"),
        item(sale_code="V2", ref="P2", store="000002", total="500.00"),
        item(sale_code="V3", ref="P3", store="000002", total="288.00"),
        item(sale_code="V3", ref="P3", store="000002", total="288.00"),
    ])
    out = sync_daily(db, src, DAY, DAY)

    assert out.items_received == 4
    assert out.lines_inserted == 3
    assert out.skipped == 1
    assert out.products_inserted == 3
    assert (out.created, out.updated, out.failed) == (1, 0, 0)
    assert out.stores_processed == 1
    assert out.start_date == out.end_date == DAY
    assert db.scalar(select(DailySale.total)) == Decimal("1788.00")


def test_daily_is_idempotent(db, source, item):
    src = source([item(sale_code=f"S{i}", total="2.50") for i in range(4)])
    sync_daily(db, src, DAY, DAY)
    snapshot = [(r.store_code, r.date, r.total) for r in db.scalars(select(DailySale))]

    out = sync_daily(db, src, DAY, DAY)
    assert out.lines_inserted == 0
    assert out.skipped == 4
    assert (out.created, out.updated) == (0, 1)
    assert db.scalar(select(func.count()).select_from(SaleLine)) == 4
    assert [(r.store_code, r.date, r.total) for r in db.scalars(select(DailySale))] == snapshot


def test_daily_store_filter_drops_other_stores(db, source, item):
    src = source([item(sale_code="A", store="000001"), item(sale_code="B", store="000002")])
    out = sync_daily(db, src, DAY, DAY, store_codes=["000002"])
    assert out.items_received == 1
    assert db.scalar(select(func.count()).select_from(SaleLine)) == 1
    assert db.scalar(select(DailySale.store_code)) == "000002"


def test_daily_reports_malformed_items(db, source, item):
    out = sync_daily(db, source([item(sale_code=None), item(sale_code="OK")]), DAY, DAY)
    assert out.skipped == 1
    assert out.errors[0].field == "sale_code"


def test_upstream_failure_aborts_before_writes(db):
    with pytest.raises(UpstreamUnavailableError):
        sync_daily(db, BrokenSource(), DAY, DAY)
    assert db.scalar(select(func.count()).select_from(DailySale)) == 0


@pytest.mark.parametrize(
    "start,end,codes",
    [
        (dt.date(2025, 9, 14), dt.date(2025, 9, 13), None),
        (dt.date(2025, 9, 13), dt.date(2025, 9, 13), []),
        (dt.date(2024, 1, 1), dt.date(2025, 9, 13), None),
    ],
)
def test_invalid_ranges_are_rejected(db, source, start, end, codes):
    src = source()
    with pytest.raises(SyncValidationError):
        sync_daily(db, src, start, end, codes)
    with pytest.raises(SyncValidationError):
        sync_monthly(db, start, end, codes)
    assert src.calls == []


@pytest.mark.parametrize("year", [1999, dt.date.today().year + 2])
def test_year_out_of_bounds_is_rejected(db, year):
    with pytest.raises(SyncValidationError):
        sync_yearly(db, year)


def test_full_chain_daily_monthly_yearly(db, source, item):
    src = source([
        item(sale_code="A", total="10.00", when=dt.datetime(2025, 1, 31, 12, 0)),
        item(sale_code="B", total="20.00", when=dt.datetime(2025, 2, 1, 12, 0)),
        item(sale_code="C", total="30.00", when=dt.datetime(2025, 2, 2, 12, 0), channel="pos"),
    ])
    sync_daily(db, src, dt.date(2025, 1, 31), dt.date(2025, 2, 2))
    monthly = sync_monthly(db, dt.date(2025, 1, 31), dt.date(2025, 2, 2))
    yearly = sync_yearly(db, 2025)

    assert monthly.months_processed == 2
    assert monthly.created == 2
    months = {r.month: r.total for r in db.scalars(select(MonthlySale))}
    assert months == {dt.date(2025, 1, 1): Decimal("10.00"), dt.date(2025, 2, 1): Decimal("50.00")}
    assert yearly.year == 2025
    assert db.scalar(select(YearlySale.total)) == Decimal("60.00")
