from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from salesync.core.config import settings
from salesync.core.logging import logger
from salesync.db.models.product import DESCRIPTIVE_FIELDS, Product
from salesync.schemas.upstream import RawSaleItem
from salesync.services.sync.periods import chunked
from salesync.services.sync.utils import trunc


@dataclass
class CatalogResult:
    seen: int = 0
    inserted: int = 0
    updated: int = 0


def _product_values(item: RawSaleItem) -> dict[str, Optional[str]]:
    return dict(
        product_code=trunc(item.product_code, 20),
        section=trunc(item.section, 50),
        group_name=trunc(item.group, 50),
        subgroup=trunc(item.subgroup, 50),
        brand=trunc(item.brand, 50),
        description=trunc(item.product_description, 250),
    )


def existing_ref_codes(db: Session, ref_codes: Iterable[str], batch_size: int | None = None) -> set[str]:
    """Set-membership lookup: one IN (...) query per chunk, never one per code."""
    codes = sorted(set(ref_codes))
    size = batch_size or settings.SYNC_BATCH_SIZE
    found: set[str] = set()
    for chunk in chunked(codes, size):
        found.update(db.scalars(select(Product.ref_code).where(Product.ref_code.in_(chunk))))
    return found


def _existing_products(db: Session, ref_codes: Iterable[str]) -> dict[str, Product]:
    codes = sorted(set(ref_codes))
    out: dict[str, Product] = {}
    for chunk in chunked(codes, settings.SYNC_BATCH_SIZE):
        for p in db.scalars(select(Product).where(Product.ref_code.in_(chunk))):
            out[p.ref_code] = p
    return out


def _refresh(product: Product, values: dict[str, Optional[str]]) -> bool:
    changed = False
    for f in DESCRIPTIVE_FIELDS:
        v = values.get(f)
        if v is not None and getattr(product, f) != v:
            setattr(product, f, v)
            changed = True
    return changed


def register_products(db: Session, items: Iterable[RawSaleItem], refresh: bool | None = None) -> CatalogResult:
    """Insert products not yet in the catalog.

    The first item seen for a reference code supplies the descriptive fields.
    Existing products are left alone unless ``refresh`` is on, in which case
    differing description fields are overwritten from upstream.
    """
    candidates: dict[str, dict[str, Optional[str]]] = {}
    for item in items:
        ref = trunc(item.product_ref_code, 20)
        if not ref or ref in candidates:
            continue
        candidates[ref] = _product_values(item)

    result = CatalogResult(seen=len(candidates))
    if not candidates:
        return result

    if refresh is None:
        refresh = settings.CATALOG_REFRESH_DESCRIPTIONS

    for attempt in (1, 2):
        updated = 0
        if refresh:
            existing = _existing_products(db, candidates)
            known = set(existing)
            for ref, product in existing.items():
                updated += _refresh(product, candidates[ref])
        else:
            known = existing_ref_codes(db, candidates)

        missing = [ref for ref in candidates if ref not in known]
        for ref in missing:
            db.add(Product(ref_code=ref, **candidates[ref]))

        try:
            db.commit()
        except IntegrityError:
            # another batch registered some of these codes between our read and write
            db.rollback()
            if attempt == 2:
                raise
            logger.warning("catalog_insert_conflict", candidates=len(missing))
            continue

        result.inserted = len(missing)
        result.updated = updated
        break

    logger.info(
        "catalog_resolved",
        seen=result.seen,
        inserted=result.inserted,
        updated=result.updated,
    )
    return result
