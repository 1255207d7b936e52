import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RawSaleItem(BaseModel):
    """One itemized sale line as returned by the legacy source.

    Every field is optional so that a malformed record still reaches the
    importer, where it is counted as skipped instead of failing the batch.
    ``invalid_fields`` lists payload keys that were present but unparseable.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    sale_code: str | None = None
    item_sequence: int | None = None
    employee_code: str | None = None
    store_code: str | None = None

    product_ref_code: str | None = None
    product_code: str | None = None
    section: str | None = None
    group: str | None = None
    subgroup: str | None = None
    brand: str | None = None
    product_description: str | None = None
    ncm: str | None = None

    channel: str | None = None
    quantity: int | None = None
    unit_price: Decimal | None = None
    total_price: Decimal | None = None
    sale_date: dt.datetime | None = None

    invalid_fields: list[str] = Field(default_factory=list, exclude=True)
