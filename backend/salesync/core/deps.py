from salesync.db.session import SessionLocal
from salesync.services.upstream.client import LegacySalesClient, SaleItemSource


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_sale_source() -> SaleItemSource:
    return LegacySalesClient()
