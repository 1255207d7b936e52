from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from salesync.db.base import Base
from salesync.db.models._mixins import TimestampMixin

# fields that may be refreshed from upstream; ref_code never changes
DESCRIPTIVE_FIELDS = ("product_code", "section", "group_name", "subgroup", "brand", "description")


class Product(Base, TimestampMixin):
    __tablename__ = "product"

    id: Mapped[int] = mapped_column(primary_key=True)
    ref_code: Mapped[str] = mapped_column(String(20), unique=True, index=True)
    product_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    section: Mapped[str | None] = mapped_column(String(50), nullable=True)
    group_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    subgroup: Mapped[str | None] = mapped_column(String(50), nullable=True)
    brand: Mapped[str | None] = mapped_column(String(50), nullable=True)
    description: Mapped[str | None] = mapped_column(String(250), nullable=True)
