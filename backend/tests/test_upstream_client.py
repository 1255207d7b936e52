import datetime as dt
from decimal import Decimal

import pytest
import requests

from salesync.core.errors import UpstreamUnavailableError
from salesync.services.upstream.client import LegacySalesClient, parse_sale_item


class _Resp:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


RECORD = {
    "saleCode": "037955",
    "itemSequence": 1,
    "employeeCode": "E01",
    "storeCode": "000002",
    "productRefCode": "010984",
    "productDescription": "Shirt",
    "quantity": 2,
    "unitPrice": "10.50",
    "totalPrice": "21.00",
    "saleDate": "2025-09-13T14:05:00",
    "origin": "PDV",
}


def test_fetch_builds_request_and_parses(monkeypatch):
    seen = {}

    def fake_get(self, url, params=None, headers=None, timeout=None):
        seen.update(url=url, params=params, headers=headers, timeout=timeout)
        return _Resp([RECORD])

    monkeypatch.setattr(requests.Session, "get", fake_get)
    client = LegacySalesClient(base_url="http://legacy/api/", token="t0k", timeout=5, store_codes=["000002"])
    items = client.fetch_sale_items(dt.date(2025, 9, 13), dt.date(2025, 9, 14))

    assert seen["url"] == "http://legacy/api/sale-items/details"
    assert seen["params"] == {
        "startDate": "2025-09-13T00:00:00",
        "endDate": "2025-09-14T23:59:59",
        "storeCodes": "000002",
    }
    assert seen["headers"]["Authorization"] == "Bearer t0k"
    assert seen["timeout"] == 5

    [it] = items
    assert it.sale_code == "037955"
    assert it.channel == "pos"
    assert it.total_price == Decimal("21.00")
    assert it.sale_date == dt.datetime(2025, 9, 13, 14, 5)


def test_wrapped_payload_is_accepted(monkeypatch):
    monkeypatch.setattr(requests.Session, "get", lambda self, url, **kw: _Resp({"data": [RECORD, RECORD]}))
    items = LegacySalesClient(base_url="http://legacy").fetch_sale_items(dt.date(2025, 1, 1), dt.date(2025, 1, 1))
    assert len(items) == 2


@pytest.mark.parametrize(
    "response",
    [
        _Resp([], status=503),
        _Resp(ValueError("not json")),
        _Resp({"message": "nope"}),
    ],
)
def test_bad_responses_raise_upstream_error(monkeypatch, response):
    monkeypatch.setattr(requests.Session, "get", lambda self, url, **kw: response)
    with pytest.raises(UpstreamUnavailableError):
        LegacySalesClient(base_url="http://legacy").fetch_sale_items(dt.date(2025, 1, 1), dt.date(2025, 1, 1))


def test_connection_error_raises_upstream_error(monkeypatch):
    def boom(self, url, **kw):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(requests.Session, "get", boom)
    with pytest.raises(UpstreamUnavailableError):
        LegacySalesClient(base_url="http://legacy").fetch_sale_items(dt.date(2025, 1, 1), dt.date(2025, 1, 1))


def test_parse_marks_unparseable_fields():
    it = parse_sale_item({**RECORD, "totalPrice": "abc", "itemSequence": "x"})
    assert it.invalid_fields == ["itemSequence", "totalPrice"]
    assert it.total_price is None
    assert it.sale_code == "037955"


def test_parse_origin_mapping_and_non_dict():
    assert parse_sale_item({**RECORD, "origin": "DANFE"}).channel == "invoiced"
    assert parse_sale_item({**RECORD, "origin": None, "eventSource": "troca"}).channel == "exchange"
    assert parse_sale_item("garbage").invalid_fields == ["record"]
