from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from salesync.core.config import settings
from salesync.core.logging import logger
from salesync.db.models.sale_line import SaleLine
from salesync.schemas.upstream import RawSaleItem
from salesync.services.sync.catalog import register_products
from salesync.services.sync.periods import chunked
from salesync.services.sync.utils import money, norm_str, trunc
from salesync.services.sync.validators import ValidationError

CHANNELS = ("invoiced", "pos", "exchange")
DEFAULT_CHANNEL = "invoiced"

MANDATORY_FIELDS = ("sale_code", "item_sequence", "product_ref_code", "store_code", "sale_date")
_MAX_LEN = {"sale_code": 20, "product_ref_code": 20, "store_code": 10}

LineKey = tuple[str, str, int]


@dataclass
class ImportResult:
    received: int = 0
    inserted: int = 0
    skipped: int = 0
    products_inserted: int = 0
    errors: list[ValidationError] = field(default_factory=list)


# -----------------------------
# Helpers
# -----------------------------
def normalize_channel(raw: Any) -> Optional[str]:
    s = norm_str(raw)
    if s is None:
        return DEFAULT_CHANNEL
    s = s.lower()
    return s if s in CHANNELS else None


def _wall_clock(ts: dt.datetime) -> dt.datetime:
    # keep the store's local wall-clock time, as the legacy system reports it
    return ts.replace(tzinfo=None)


def line_key(item: RawSaleItem) -> LineKey:
    return (norm_str(item.sale_code), norm_str(item.product_ref_code), int(item.item_sequence))


def _error(item: RawSaleItem, message: str, field_name: str | None) -> ValidationError:
    return ValidationError(
        message=message,
        sale_code=norm_str(item.sale_code),
        item_sequence=item.item_sequence,
        field=field_name,
    )


def validate_item(item: RawSaleItem) -> ValidationError | None:
    if item.invalid_fields:
        return _error(item, f"Unparseable field(s): {', '.join(item.invalid_fields)}", item.invalid_fields[0])

    for name in MANDATORY_FIELDS:
        v = getattr(item, name)
        if v is None or (isinstance(v, str) and not v.strip()):
            return _error(item, f"Missing mandatory field: {name}", name)

    for name, max_len in _MAX_LEN.items():
        if len(norm_str(getattr(item, name))) > max_len:
            return _error(item, f"Field too long (>{max_len}): {name}", name)

    if normalize_channel(item.channel) is None:
        return _error(item, f"Unknown channel: {item.channel}", "channel")
    return None


def _to_line(item: RawSaleItem) -> SaleLine:
    sold_at = _wall_clock(item.sale_date)
    sale_code, ref_code, seq = line_key(item)
    channel = normalize_channel(item.channel)
    unit_price = money(item.unit_price)
    total_price = money(item.total_price)
    if channel == "exchange":
        # returned merchandise reduces revenue whatever sign upstream reports
        unit_price, total_price = -abs(unit_price), -abs(total_price)
    return SaleLine(
        sale_code=sale_code,
        product_ref_code=ref_code,
        item_sequence=seq,
        store_code=norm_str(item.store_code),
        collaborator_code=trunc(item.employee_code, 10),
        channel=channel,
        ncm=trunc(item.ncm, 8),
        quantity=item.quantity or 0,
        unit_price=unit_price,
        total_price=total_price,
        sold_at=sold_at,
        sale_date=sold_at.date(),
    )


# -----------------------------
# Bulk existence check
# -----------------------------
def existing_line_keys(db: Session, keys: Iterable[LineKey], batch_size: int | None = None) -> set[LineKey]:
    """Return the subset of ``keys`` already stored.

    Queried per chunk of sale codes with three component IN lists
    (sale code, reference code, sequence); rows matching the lists but not an
    exact candidate key are discarded here.
    """
    wanted = set(keys)
    if not wanted:
        return set()

    by_sale: dict[str, list[LineKey]] = {}
    for k in wanted:
        by_sale.setdefault(k[0], []).append(k)

    found: set[LineKey] = set()
    for sale_codes in chunked(sorted(by_sale), batch_size or settings.SYNC_BATCH_SIZE):
        sub = [k for sc in sale_codes for k in by_sale[sc]]
        refs = sorted({k[1] for k in sub})
        seqs = sorted({k[2] for k in sub})
        rows = db.execute(
            select(SaleLine.sale_code, SaleLine.product_ref_code, SaleLine.item_sequence).where(
                SaleLine.sale_code.in_(sale_codes),
                SaleLine.product_ref_code.in_(refs),
                SaleLine.item_sequence.in_(seqs),
            )
        )
        for sale_code, ref_code, seq in rows:
            k = (sale_code, ref_code, seq)
            if k in wanted:
                found.add(k)
    return found


def import_sale_lines(db: Session, items: Iterable[RawSaleItem]) -> ImportResult:
    """Persist sale lines not yet stored. Returns {received, inserted, skipped}.

    Malformed items are skipped and reported, never fatal. Products are
    registered before lines since every line references one.
    """
    items = list(items)
    result = ImportResult(received=len(items))

    valid: list[RawSaleItem] = []
    for item in items:
        err = validate_item(item)
        if err is not None:
            result.errors.append(err)
            continue
        valid.append(item)

    if result.errors:
        logger.warning("sale_items_malformed", count=len(result.errors), first=result.errors[0].message)

    catalog = register_products(db, valid)
    result.products_inserted = catalog.inserted

    for attempt in (1, 2):
        seen = existing_line_keys(db, (line_key(i) for i in valid))
        new_lines: list[SaleLine] = []
        for item in valid:
            key = line_key(item)
            if key in seen:
                continue
            seen.add(key)
            new_lines.append(_to_line(item))

        db.add_all(new_lines)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            if attempt == 2:
                raise
            logger.warning("sale_line_insert_conflict", candidates=len(new_lines))
            continue

        result.inserted = len(new_lines)
        break

    result.skipped = result.received - result.inserted
    logger.info(
        "sale_lines_imported",
        received=result.received,
        inserted=result.inserted,
        skipped=result.skipped,
        malformed=len(result.errors),
        products_inserted=result.products_inserted,
    )
    return result
