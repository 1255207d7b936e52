import datetime as dt
from pydantic import BaseModel, Field


class DailySyncIn(BaseModel):
    start_date: dt.date
    end_date: dt.date
    store_codes: list[str] | None = None


class MonthlySyncIn(BaseModel):
    start_date: dt.date
    end_date: dt.date
    store_codes: list[str] | None = None


class YearlySyncIn(BaseModel):
    year: int
    store_codes: list[str] | None = None


class ItemErrorOut(BaseModel):
    message: str
    sale_code: str | None = None
    item_sequence: int | None = None
    field: str | None = None


class DailySyncOut(BaseModel):
    created: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0
    stores_processed: int = 0
    items_received: int = 0
    lines_inserted: int = 0
    products_inserted: int = 0
    start_date: dt.date
    end_date: dt.date
    processed_at: dt.datetime
    errors: list[ItemErrorOut] = Field(default_factory=list)


class MonthlySyncOut(BaseModel):
    created: int = 0
    updated: int = 0
    failed: int = 0
    stores_processed: int = 0
    months_processed: int = 0
    start_date: dt.date
    end_date: dt.date
    processed_at: dt.datetime


class YearlySyncOut(BaseModel):
    created: int = 0
    updated: int = 0
    failed: int = 0
    stores_processed: int = 0
    year: int
    processed_at: dt.datetime


class SyncStatusOut(BaseModel):
    service: str
    status: str
    version: str
    checked_at: dt.datetime
