import datetime as dt
from decimal import Decimal

from sqlalchemy import Date, DateTime, ForeignKey, Index, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from salesync.db.base import Base
from salesync.db.models._mixins import TimestampMixin


class SaleLine(Base, TimestampMixin):
    __tablename__ = "sale_line"
    __table_args__ = (
        UniqueConstraint("sale_code", "product_ref_code", "item_sequence", name="uq_sale_line_key"),
        Index("ix_sale_line_store_date", "store_code", "sale_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    sale_code: Mapped[str] = mapped_column(String(20), index=True)
    product_ref_code: Mapped[str] = mapped_column(String(20), ForeignKey("product.ref_code"), index=True)
    item_sequence: Mapped[int] = mapped_column(Integer)

    store_code: Mapped[str] = mapped_column(String(10))
    collaborator_code: Mapped[str | None] = mapped_column(String(10), nullable=True)
    channel: Mapped[str] = mapped_column(String(16), default="invoiced")  # invoiced|pos|exchange
    ncm: Mapped[str | None] = mapped_column(String(8), nullable=True)

    quantity: Mapped[int] = mapped_column(Integer, default=0)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=Decimal("0"))
    total_price: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=Decimal("0"))

    sold_at: Mapped[dt.datetime] = mapped_column(DateTime)
    sale_date: Mapped[dt.date] = mapped_column(Date, index=True)
