import datetime as dt
from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from salesync.db.models.sale_line import SaleLine
from salesync.schemas.upstream import RawSaleItem
from salesync.services.sync.sale_lines import (
    existing_line_keys,
    import_sale_lines,
    normalize_channel,
    validate_item,
)


def _count(db):
    return db.scalar(select(func.count()).select_from(SaleLine))


def test_same_sale_and_product_different_sequence_are_distinct(db, item):
    a = item(sale_code="037955", ref="010984", seq=1)
    b = item(sale_code="037955", ref="010984", seq=2)
    res = import_sale_lines(db, [a, b])
    assert res.inserted == 2
    assert _count(db) == 2

    dup = item(sale_code="037955", ref="010984", seq=1, total="999.00")
    res = import_sale_lines(db, [dup])
    assert res.received == 1
    assert res.inserted == 0
    assert res.skipped == 1
    assert _count(db) == 2
    # the stored line keeps its original value
    stored = db.scalar(select(SaleLine.total_price).where(SaleLine.item_sequence == 1))
    assert stored == Decimal("100.00")


def test_duplicate_within_batch_keeps_first(db, item):
    res = import_sale_lines(db, [item(total="10.00"), item(total="20.00")])
    assert res.inserted == 1
    assert res.skipped == 1
    assert db.scalar(select(SaleLine.total_price)) == Decimal("10.00")


def test_reimport_is_idempotent(db, item):
    batch = [item(sale_code=f"S{i}", ref=f"P{i % 3}") for i in range(5)]
    import_sale_lines(db, batch)
    res = import_sale_lines(db, batch)
    assert res.inserted == 0
    assert res.skipped == 5
    assert res.products_inserted == 0
    assert _count(db) == 5


def test_malformed_items_are_skipped_and_reported(db, item):
    missing_ref = item(ref=None)
    bad_channel = item(sale_code="S2", channel="gift")
    unparseable = RawSaleItem(sale_code="S3", invalid_fields=["totalPrice"])
    good = item(sale_code="S4")

    res = import_sale_lines(db, [missing_ref, bad_channel, unparseable, good])
    assert res.received == 4
    assert res.inserted == 1
    assert res.skipped == 3
    assert {e.field for e in res.errors} == {"product_ref_code", "channel", "totalPrice"}


def test_line_fields_are_mapped(db, item):
    it = item(
        sale_code="S9",
        ref="P9",
        store="000002",
        employee_code="E1",
        channel=None,
        when=dt.datetime(2025, 9, 13, 23, 59, tzinfo=dt.timezone(dt.timedelta(hours=-3))),
    )
    import_sale_lines(db, [it])
    line = db.scalar(select(SaleLine))
    assert line.store_code == "000002"
    assert line.collaborator_code == "E1"
    assert line.channel == "invoiced"
    assert line.sale_date == dt.date(2025, 9, 13)
    assert line.sold_at == dt.datetime(2025, 9, 13, 23, 59)


def test_existing_line_keys_matches_exact_keys_only(db, item):
    import_sale_lines(db, [item(sale_code="A", ref="X", seq=1), item(sale_code="B", ref="Y", seq=2)])
    # every component is present in the stored rows, the combination is not
    candidates = [("A", "X", 1), ("A", "Y", 2), ("B", "X", 1), ("B", "Y", 2)]
    assert existing_line_keys(db, candidates, batch_size=1) == {("A", "X", 1), ("B", "Y", 2)}


def test_validate_item_and_channels(item):
    assert validate_item(item()) is None
    assert validate_item(item(store="12345678901")).field == "store_code"
    assert normalize_channel(" POS ") == "pos"
    assert normalize_channel(None) == "invoiced"
    assert normalize_channel("voucher") is None


def _racing_key_lookup(monkeypatch, db, lines_to_inject):
    """Commit a sale line between the existence check and the insert, as a concurrent run would."""
    real = existing_line_keys
    pending = list(lines_to_inject)

    def lookup(session, keys, batch_size=None):
        found = real(session, keys, batch_size)
        if pending:
            sale_code, ref, seq = pending.pop(0)
            db.add(SaleLine(
                sale_code=sale_code,
                product_ref_code=ref,
                item_sequence=seq,
                store_code="000001",
                channel="invoiced",
                total_price=Decimal("1.00"),
                sold_at=dt.datetime(2025, 9, 13, 9, 0),
                sale_date=dt.date(2025, 9, 13),
            ))
            db.commit()
        return found

    monkeypatch.setattr("salesync.services.sync.sale_lines.existing_line_keys", lookup)


def test_line_insert_conflict_is_retried_and_key_skipped(db, item, monkeypatch):
    _racing_key_lookup(monkeypatch, db, [("S1", "P1", 1)])
    res = import_sale_lines(db, [item(sale_code="S1"), item(sale_code="S2")])

    assert res.inserted == 1
    assert res.skipped == 1
    assert _count(db) == 2
    # the concurrently written line is kept, not overwritten
    stored = db.scalar(select(SaleLine.total_price).where(SaleLine.sale_code == "S1"))
    assert stored == Decimal("1.00")


def test_second_line_conflict_propagates(db, item, monkeypatch):
    _racing_key_lookup(monkeypatch, db, [("S1", "P1", 1), ("S2", "P1", 1)])
    with pytest.raises(IntegrityError):
        import_sale_lines(db, [item(sale_code="S1"), item(sale_code="S2")])
