from sqlalchemy import select
from sqlalchemy.orm import Session

from salesync.core.config import settings
from salesync.core.logging import logger
from salesync.db.models.store import Store
from salesync.db.session import SessionLocal


def seed_stores(db: Session, codes: list[str]) -> int:
    known = set(db.scalars(select(Store.code).where(Store.code.in_(codes))))
    created = 0
    for code in codes:
        if code in known:
            continue
        db.add(Store(code=code, name=f"Store {code}", is_active=True))
        created += 1
    db.commit()
    return created


def seed_demo():
    db: Session = SessionLocal()
    try:
        codes = [c.strip() for c in settings.DEMO_STORE_CODES.split(",") if c.strip()]
        if codes:
            created = seed_stores(db, codes)
            logger.info("demo_stores_seeded", created=created, codes=codes)
    finally:
        db.close()
