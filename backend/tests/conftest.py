import datetime as dt
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from salesync.db.base import Base
from salesync.db import models  # noqa: F401
from salesync.db.models.store import Store
from salesync.schemas.upstream import RawSaleItem


class FakeSource:
    """In-memory stand-in for the legacy API, filtered by sale date like the real endpoint."""

    def __init__(self, items=None):
        self.items = list(items or [])
        self.calls = []

    def fetch_sale_items(self, start, end):
        self.calls.append((start, end))
        return [i for i in self.items if i.sale_date is None or start <= i.sale_date.date() <= end]


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def stores(db):
    def _add(*codes, active=True):
        for code in codes:
            db.add(Store(code=code, name=f"Store {code}", is_active=active))
        db.commit()
    return _add


@pytest.fixture
def item():
    def _make(
        sale_code="S1",
        seq=1,
        ref="P1",
        store="000001",
        total="100.00",
        channel="invoiced",
        when=dt.datetime(2025, 9, 13, 10, 30),
        **extra,
    ):
        return RawSaleItem(
            sale_code=sale_code,
            item_sequence=seq,
            product_ref_code=ref,
            store_code=store,
            product_description=f"Product {ref}",
            quantity=1,
            unit_price=Decimal(total),
            total_price=Decimal(total),
            channel=channel,
            sale_date=when,
            **extra,
        )
    return _make


@pytest.fixture
def source():
    return FakeSource
