import datetime as dt
from decimal import Decimal

from sqlalchemy import Date, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from salesync.db.base import Base
from salesync.db.models._mixins import TimestampMixin

ZERO = Decimal("0.00")


class DailySale(Base, TimestampMixin):
    __tablename__ = "daily_sale"
    __table_args__ = (UniqueConstraint("store_code", "date", name="uq_daily_sale_store_date"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    store_code: Mapped[str] = mapped_column(String(10), index=True)
    date: Mapped[dt.date] = mapped_column(Date, index=True)

    invoiced: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=ZERO)
    pos: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=ZERO)
    exchange: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=ZERO)
    total: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=ZERO)


class MonthlySale(Base, TimestampMixin):
    __tablename__ = "monthly_sale"
    __table_args__ = (UniqueConstraint("store_code", "month", name="uq_monthly_sale_store_month"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    store_code: Mapped[str] = mapped_column(String(10), index=True)
    month: Mapped[dt.date] = mapped_column(Date, index=True)  # first day of month
    total: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=ZERO)


class YearlySale(Base, TimestampMixin):
    __tablename__ = "yearly_sale"
    __table_args__ = (UniqueConstraint("store_code", "year", name="uq_yearly_sale_store_year"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    store_code: Mapped[str] = mapped_column(String(10), index=True)
    year: Mapped[int] = mapped_column(Integer, index=True)
    total: Mapped[Decimal] = mapped_column(Numeric(15, 2), default=ZERO)
