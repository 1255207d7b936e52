import datetime as dt

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from salesync import __version__
from salesync.core.deps import get_db, get_sale_source
from salesync.schemas.sync import (
    DailySyncIn,
    DailySyncOut,
    MonthlySyncIn,
    MonthlySyncOut,
    SyncStatusOut,
    YearlySyncIn,
    YearlySyncOut,
)
from salesync.services.sync.orchestrator import sync_daily, sync_monthly, sync_yearly
from salesync.services.upstream.client import SaleItemSource

router = APIRouter()


@router.post("/daily-sales", response_model=DailySyncOut)
def post_daily_sales(
    payload: DailySyncIn,
    db: Session = Depends(get_db),
    source: SaleItemSource = Depends(get_sale_source),
):
    return sync_daily(db, source, payload.start_date, payload.end_date, payload.store_codes)


@router.post("/monthly-sales", response_model=MonthlySyncOut)
def post_monthly_sales(payload: MonthlySyncIn, db: Session = Depends(get_db)):
    return sync_monthly(db, payload.start_date, payload.end_date, payload.store_codes)


@router.post("/yearly-sales", response_model=YearlySyncOut)
def post_yearly_sales(payload: YearlySyncIn, db: Session = Depends(get_db)):
    return sync_yearly(db, payload.year, payload.store_codes)


@router.get("/status", response_model=SyncStatusOut)
def get_status():
    return SyncStatusOut(
        service="salesync",
        status="UP",
        version=__version__,
        checked_at=dt.datetime.now(dt.timezone.utc),
    )
