"""
HTTP client for the legacy ERP sales API.

Only transport and payload mapping live here; deduplication and rollups are
handled by salesync.services.sync.
"""
from __future__ import annotations

import datetime as dt
from typing import Any, Protocol

import requests
from pydantic import ValidationError as PydanticValidationError

from salesync.core.config import settings
from salesync.core.errors import UpstreamUnavailableError
from salesync.core.logging import logger
from salesync.schemas.upstream import RawSaleItem

SALE_ITEMS_ENDPOINT = "sale-items/details"

# upstream event origin -> revenue channel
ORIGIN_CHANNELS = {
    "DANFE": "invoiced",
    "NFE": "invoiced",
    "PDV": "pos",
    "TROCA": "exchange",
    "EXCHANGE": "exchange",
}


class SaleItemSource(Protocol):
    def fetch_sale_items(self, start: dt.date, end: dt.date) -> list[RawSaleItem]: ...


def parse_sale_item(payload: Any) -> RawSaleItem:
    """Map one upstream record to a RawSaleItem.

    Fields that fail to parse are dropped and listed in ``invalid_fields`` so
    the importer can skip the item and report why.
    """
    if not isinstance(payload, dict):
        return RawSaleItem(invalid_fields=["record"])

    data = dict(payload)
    origin = data.pop("origin", None) or data.pop("eventSource", None)
    if data.get("channel") is None and origin is not None:
        data["channel"] = ORIGIN_CHANNELS.get(str(origin).strip().upper(), str(origin))

    try:
        return RawSaleItem.model_validate(data)
    except PydanticValidationError as e:
        bad = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
        for key in bad:
            data.pop(key, None)
        item = RawSaleItem.model_validate(data)
        item.invalid_fields = bad
        return item


class LegacySalesClient:
    """Fetches itemized sales for a date range from the legacy API."""

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        store_codes: list[str] | None = None,
        session: requests.Session | None = None,
    ):
        self.base_url = (base_url or settings.UPSTREAM_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.UPSTREAM_TIMEOUT_SEC
        self.store_codes = store_codes
        self.session = session or requests.Session()
        self.headers = {"Accept": "application/json"}
        token = token if token is not None else settings.UPSTREAM_TOKEN
        if token:
            self.headers["Authorization"] = f"Bearer {token}"

    def _params(self, start: dt.date, end: dt.date) -> dict[str, str]:
        params = {
            "startDate": dt.datetime.combine(start, dt.time.min).isoformat(),
            "endDate": dt.datetime.combine(end, dt.time(23, 59, 59)).isoformat(),
        }
        if self.store_codes:
            params["storeCodes"] = ",".join(self.store_codes)
        return params

    def fetch_sale_items(self, start: dt.date, end: dt.date) -> list[RawSaleItem]:
        url = f"{self.base_url}/{SALE_ITEMS_ENDPOINT}"
        try:
            response = self.session.get(url, params=self._params(start, end), headers=self.headers, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("upstream_request_failed", url=url, start=str(start), end=str(end), error=str(e))
            raise UpstreamUnavailableError(f"Legacy API request failed: {e}") from e

        if isinstance(payload, dict):
            payload = payload.get("data", payload.get("items"))
        if not isinstance(payload, list):
            raise UpstreamUnavailableError("Legacy API returned an unexpected payload")

        items = [parse_sale_item(p) for p in payload]
        logger.info("upstream_sale_items_fetched", start=str(start), end=str(end), count=len(items))
        return items
